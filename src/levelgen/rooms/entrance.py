from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ..geometry import Point


class Side(IntEnum):
    """Room sides in counter-clockwise quarter-turn order."""

    EAST = 0
    NORTH = 1
    WEST = 2
    SOUTH = 3

    @property
    def opposite(self) -> "Side":
        return Side((self + 2) % 4)

    def rotated(self, quarter_turns: int) -> "Side":
        return Side((self + quarter_turns) % 4)

    def turns_to(self, target: "Side") -> int:
        """Counter-clockwise quarter turns that bring this side onto ``target``."""
        return (target - self) % 4

    @classmethod
    def parse(cls, value: str) -> "Side":
        return cls[value.strip().upper()]


@dataclass(frozen=True)
class Entrance:
    """Connection point on a room side.

    ``offset`` is the unit cell along the side, counted from the bottom for
    EAST/WEST and from the left for NORTH/SOUTH.
    """

    side: Side
    offset: int = 0

    def span(self, width: int, height: int) -> int:
        return height if self.side in (Side.EAST, Side.WEST) else width

    def rotated(self, quarter_turns: int, width: int, height: int) -> "Entrance":
        """Rotate counter-clockwise around a ``width`` x ``height`` room."""
        entrance = self
        for _ in range(quarter_turns % 4):
            if entrance.side in (Side.EAST, Side.WEST):
                offset = height - 1 - entrance.offset
            else:
                offset = entrance.offset
            entrance = Entrance(entrance.side.rotated(1), offset)
            width, height = height, width
        return entrance

    def port(self, left: int, right: int, top: int, bottom: int) -> Point:
        """World cell just outside the footprint where a neighbour's port must sit."""
        if self.side is Side.EAST:
            return Point(right + 1, bottom + self.offset)
        if self.side is Side.WEST:
            return Point(left - 1, bottom + self.offset)
        if self.side is Side.NORTH:
            return Point(left + self.offset, top + 1)
        return Point(left + self.offset, bottom - 1)

    def anchor_for(self, port: Point, width: int, height: int) -> Point:
        """Bottom-left corner that puts this entrance's port exactly on ``port``."""
        if self.side is Side.WEST:
            return Point(port.x + 1, port.y - self.offset)
        if self.side is Side.EAST:
            return Point(port.x - 1 - width, port.y - self.offset)
        if self.side is Side.SOUTH:
            return Point(port.x - self.offset, port.y + 1)
        return Point(port.x - self.offset, port.y - 1 - height)

    def probe(self, port: Point) -> tuple[int, int, int, int]:
        """Bounds (left, right, top, bottom) of the unit cell a neighbour needs beyond ``port``."""
        if self.side is Side.EAST:
            return (port.x + 1, port.x + 2, port.y + 1, port.y)
        if self.side is Side.WEST:
            return (port.x - 2, port.x - 1, port.y + 1, port.y)
        if self.side is Side.NORTH:
            return (port.x, port.x + 1, port.y + 2, port.y + 1)
        return (port.x, port.x + 1, port.y - 1, port.y - 2)
