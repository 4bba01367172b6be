from __future__ import annotations

from typing import Protocol, Sequence

from .geometry import Container, Point


class RoomProtocol(Protocol):
    """Contract the level generator needs from a placeable room.

    The generator never looks inside a room: it only asks whether the room can
    attach itself to the current layout and how many open entrances it has.
    Implementations can expand however they like as long as these members
    remain available.
    """

    name: str
    footprint: Container

    @property
    def entrance_count(self) -> int:  # pragma: no cover - type contract
        ...

    @property
    def is_spawn_capable(self) -> bool:  # pragma: no cover - type contract
        ...

    @property
    def center(self) -> Point:  # pragma: no cover - type contract
        """Footprint center in the world frame."""

    @property
    def spawn_anchor(self) -> Point:  # pragma: no cover - type contract
        """Where a team spawns when this room is picked."""

    def available_entrances(self) -> int:
        """Return the cached number of entrances still open for a neighbour."""

    def update_available_entrances(self, all_rooms: Sequence["RoomProtocol"]) -> None:
        """Recompute the open-entrance count against the full current room set."""

    def try_add(self, all_rooms: Sequence["RoomProtocol"]) -> bool:
        """Attach to a free entrance of an existing room without overlapping anything.

        On success the room's footprint is moved to its final position. On
        failure the room is left in an undefined state and should be discarded.
        """


__all__ = ["RoomProtocol"]
