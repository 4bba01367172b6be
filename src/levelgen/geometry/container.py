from __future__ import annotations

import logging
import warnings
from typing import Optional, Tuple

from ..errors import DepthError, DepthMismatchWarning
from .point import ORIGIN, Point

logger = logging.getLogger(__name__)

Bounds = Tuple[int, int, int, int]  # (left, right, top, bottom)


class Container:
    """Axis-aligned integer rectangle living in a depth-relative frame.

    A container may be owned by another container. Its bounds are stored in its
    own frame (the frame at its own depth) and ``relative_position`` is its
    offset inside the owner's frame. Asking for bounds at a shallower depth
    unwinds the ownership chain one level at a time, so a container authored in
    local space can be re-expressed in any ancestor frame:

        world = Container()                                   # depth 0
        room = Container(world, Point(10, 4), Point(3, 3))    # depth 1
        room.left(0)  -> 10

    Depth is read from the ownership chain every time it is needed.

    Notes:
        right >= left and top >= bottom are not enforced; callers are expected
        to build valid rectangles. Shape never changes after construction,
        only whole-rectangle translation through ``position_at_current_depth``.
    """

    def __init__(
        self,
        owner: Optional["Container"] = None,
        relative_position: Point = ORIGIN,
        dimension: Point = ORIGIN,
        position: Point = ORIGIN,
    ) -> None:
        self.owner = owner
        self.relative_position = relative_position
        self._left = position.x
        self._right = position.x + dimension.x
        self._top = position.y + dimension.y
        self._bottom = position.y

    @classmethod
    def from_bounds(
        cls,
        left: int,
        right: int,
        top: int,
        bottom: int,
        owner: Optional["Container"] = None,
    ) -> "Container":
        """Build a container from bounds expressed in its own frame."""
        return cls(owner, ORIGIN, Point(right - left, top - bottom), Point(left, bottom))

    def copy(self) -> "Container":
        return Container(self.owner, self.relative_position, self.dimension, self.position_at_current_depth)

    # ---------------------------
    # Own-frame properties
    # ---------------------------

    @property
    def depth(self) -> int:
        depth = 0
        node = self.owner
        while node is not None:
            depth += 1
            node = node.owner
        return depth

    @property
    def width(self) -> int:
        return self._right - self._left

    @property
    def height(self) -> int:
        return self._top - self._bottom

    @property
    def dimension(self) -> Point:
        return Point(self.width, self.height)

    @property
    def position_at_current_depth(self) -> Point:
        return Point(self._left, self._bottom)

    @position_at_current_depth.setter
    def position_at_current_depth(self, value: Point) -> None:
        diff = value - self.position_at_current_depth
        self._left += diff.x
        self._right += diff.x
        self._top += diff.y
        self._bottom += diff.y

    @property
    def top_left(self) -> Point:
        return Point(self._left, self._top)

    @property
    def top_right(self) -> Point:
        return Point(self._right, self._top)

    @property
    def bottom_left(self) -> Point:
        return Point(self._left, self._bottom)

    @property
    def bottom_right(self) -> Point:
        return Point(self._right, self._bottom)

    # ---------------------------
    # Depth re-projection
    # ---------------------------

    def to_depth(self, depth: Optional[int] = None) -> "Container":
        """Return an equivalent container expressed in the ancestor frame at ``depth``.

        Raises DepthError when ``depth`` is negative or deeper than this container.
        """
        current_depth = self.depth
        if depth is None:
            depth = current_depth
        if depth < 0 or depth > current_depth:
            raise DepthError(f"Cannot move a depth-{current_depth} container to depth {depth}")
        result = self.copy()
        while current_depth > depth:
            result = result._minus_depth()
            current_depth -= 1
        return result

    def _minus_depth(self) -> "Container":
        if self.owner is None:
            return self
        return Container(
            self.owner.owner,
            self.owner.relative_position,
            self.dimension,
            self.position_at_current_depth + self.relative_position,
        )

    def _ancestor(self, depth: int) -> Optional["Container"]:
        node: Optional[Container] = self
        current_depth = self.depth
        while node is not None and current_depth > depth:
            node = node.owner
            current_depth -= 1
        return node

    def left(self, depth: Optional[int] = None) -> int:
        return self.to_depth(depth)._left

    def right(self, depth: Optional[int] = None) -> int:
        return self.to_depth(depth)._right

    def top(self, depth: Optional[int] = None) -> int:
        return self.to_depth(depth)._top

    def bottom(self, depth: Optional[int] = None) -> int:
        return self.to_depth(depth)._bottom

    def position(self, depth: Optional[int] = None) -> Point:
        return self.to_depth(depth).position_at_current_depth

    def bounds(self, depth: Optional[int] = None) -> Bounds:
        c = self.to_depth(depth)
        return (c._left, c._right, c._top, c._bottom)

    def center(self, depth: Optional[int] = None) -> Point:
        left, right, top, bottom = self.bounds(depth)
        return Point((left + right) // 2, (bottom + top) // 2)

    # ---------------------------
    # Set operations
    # ---------------------------

    def join(self, other: "Container") -> "Container":
        """Bounding box of both containers, computed one level up.

        Both containers should share a depth. A mismatch is reported through a
        DepthMismatchWarning and an error log record; the envelope is then
        computed at the shallower depth's parent frame as a best effort.
        Joining two depth-0 containers yields a depth-0 envelope.
        """
        depth = self.depth
        other_depth = other.depth
        if depth != other_depth:
            message = f"Joining two Containers of different depth! {depth} and {other_depth}"
            logger.error(message)
            warnings.warn(message, DepthMismatchWarning, stacklevel=2)

        shared = min(depth, other_depth)
        target = max(shared - 1, 0)
        mine = self.to_depth(target)
        theirs = other.to_depth(target)
        owner = self._ancestor(target) if shared > 0 else None
        return Container.from_bounds(
            min(mine._left, theirs._left),
            max(mine._right, theirs._right),
            max(mine._top, theirs._top),
            min(mine._bottom, theirs._bottom),
            owner=owner,
        )

    def overlaps(self, other: "Container") -> bool:
        """True if the rectangles intersect; touching edges count as overlap."""
        if (
            self._right < other._left
            or other._right < self._left
            or self._top < other._bottom
            or other._top < self._bottom
        ):
            return False
        return True

    def __repr__(self) -> str:
        return (
            f"Container(depth={self.depth}, position={self.position_at_current_depth.as_tuple()}, "
            f"dimension={self.dimension.as_tuple()}, "
            f"L{self._left} R{self._right} T{self._top} B{self._bottom})"
        )
