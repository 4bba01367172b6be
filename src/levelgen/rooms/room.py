from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ..geometry import ORIGIN, Container, Point
from .entrance import Entrance

if TYPE_CHECKING:
    from ..rng import RandomSource
    from .template import RoomTemplate

logger = logging.getLogger(__name__)

OpenPort = Tuple[Entrance, Point]


class Room:
    """A placed (or candidate) instance of a RoomTemplate.

    The footprint is a Container owned by the level frame; every world-space
    question goes through ``to_depth(0)`` so the whole level can be offset by
    moving the frame.

    Connections work through ports: the cell one unit outside an entrance.
    Two rooms are connected when an entrance of each puts its port on the same
    cell while facing each other, which leaves a two-unit gap between the
    footprints. An entrance stays open while the unit cell beyond its port is
    free, i.e. while a 1x1 room could still attach there.
    """

    def __init__(self, template: "RoomTemplate", frame: Container, rng: Optional["RandomSource"] = None) -> None:
        self.template = template
        self.name = template.name
        self.footprint = Container(frame, ORIGIN, Point(template.width, template.height))
        self.entrances: List[Entrance] = list(template.entrances)
        self.rng = rng
        self._open: List[OpenPort] = []
        self._available = len(self.entrances)

    @property
    def entrance_count(self) -> int:
        return len(self.entrances)

    @property
    def is_spawn_capable(self) -> bool:
        return self.template.spawn

    @property
    def center(self) -> Point:
        return self.footprint.center(0)

    @property
    def spawn_anchor(self) -> Point:
        return self.center

    def world(self) -> Container:
        return self.footprint.to_depth(0)

    def move_to(self, world_position: Point) -> None:
        """Translate the footprint so its bottom-left corner sits at ``world_position``."""
        delta = world_position - self.footprint.position(0)
        self.footprint.position_at_current_depth = self.footprint.position_at_current_depth + delta

    def ports(self) -> List[OpenPort]:
        left, right, top, bottom = self.footprint.bounds(0)
        return [(e, e.port(left, right, top, bottom)) for e in self.entrances]

    # ---------------------------
    # Entrance bookkeeping
    # ---------------------------

    def open_ports(self) -> List[OpenPort]:
        """Open entrances as of the last ``update_available_entrances`` call."""
        return list(self._open)

    def available_entrances(self) -> int:
        return self._available

    def update_available_entrances(self, all_rooms: Sequence["Room"]) -> None:
        others = [r.world() for r in all_rooms if r is not self]
        open_ports: List[OpenPort] = []
        for entrance, port in self.ports():
            probe = Container.from_bounds(*entrance.probe(port))
            if not any(probe.overlaps(o) for o in others):
                open_ports.append((entrance, port))
        self._open = open_ports
        self._available = len(open_ports)

    # ---------------------------
    # Placement
    # ---------------------------

    def try_add(self, all_rooms: Sequence["Room"]) -> bool:
        """Attach this room to an open entrance of ``all_rooms``.

        Targets and own entrances are visited in RNG order. For each pairing the
        room is turned so its entrance faces the target (quarter turns only for
        square rooms), aligned port on port, and rejected if it overlaps any
        existing room.
        """
        targets = [port for room in all_rooms for port in room.open_ports()]
        if not targets:
            return False
        own = list(self.entrances)
        if self.rng is not None:
            targets = self.rng.shuffled(targets)
            own = self.rng.shuffled(own)

        width, height = self.footprint.width, self.footprint.height
        placed = [r.world() for r in all_rooms]

        for target, port in targets:
            facing = target.side.opposite
            for entrance in own:
                turns = entrance.side.turns_to(facing)
                if turns % 2 and width != height:
                    continue
                anchor = entrance.rotated(turns, width, height).anchor_for(port, width, height)
                candidate = Container.from_bounds(anchor.x, anchor.x + width, anchor.y + height, anchor.y)
                if any(candidate.overlaps(p) for p in placed):
                    continue
                self.entrances = [e.rotated(turns, width, height) for e in self.entrances]
                self.move_to(anchor)
                logger.debug("Placed %s at %s (turns=%d)", self.name, anchor.as_tuple(), turns)
                return True
        return False

    def __repr__(self) -> str:
        return f"Room({self.name!r}, bounds={self.footprint.bounds(0)}, entrances={self.entrance_count})"
