from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from ..errors import TemplateError
from ..geometry import Container
from .entrance import Entrance, Side

if TYPE_CHECKING:
    from ..rng import RandomSource
    from .room import Room

Size = Tuple[int, int]


@dataclass(frozen=True)
class RoomTemplate:
    """An authored room: footprint size, entrances in local space and a spawn flag.

    Templates are immutable and shared through the catalog; every placement
    attempt works on a fresh Room produced by ``instantiate``.
    """

    name: str
    width: int
    height: int
    entrances: Tuple[Entrance, ...]
    spawn: bool = False

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise TemplateError(f"Room template '{self.name}' must be at least 1x1, got {self.width}x{self.height}")
        seen = set()
        for entrance in self.entrances:
            span = entrance.span(self.width, self.height)
            if not 0 <= entrance.offset < span:
                raise TemplateError(
                    f"Room template '{self.name}': {entrance.side.name} entrance offset {entrance.offset} "
                    f"outside side length {span}"
                )
            key = (entrance.side, entrance.offset)
            if key in seen:
                raise TemplateError(f"Room template '{self.name}': duplicate entrance {entrance.side.name}:{entrance.offset}")
            seen.add(key)

    @property
    def entrance_count(self) -> int:
        return len(self.entrances)

    @property
    def size(self) -> Size:
        return (self.width, self.height)

    def instantiate(self, frame: Container, rng: Optional["RandomSource"] = None) -> "Room":
        from .room import Room

        return Room(self, frame, rng)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoomTemplate":
        """Build a template from a validated JSON object.

        Expected shape: {"name", "width", "height", "entrances": [{"side", "offset"}], "spawn"}.
        """
        try:
            entrances = tuple(
                Entrance(Side.parse(e["side"]), int(e.get("offset", 0))) for e in data.get("entrances", [])
            )
            return cls(
                name=str(data["name"]),
                width=int(data["width"]),
                height=int(data["height"]),
                entrances=entrances,
                spawn=bool(data.get("spawn", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TemplateError(f"Invalid room template {dict(data)!r}: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "entrances": [{"side": e.side.name.lower(), "offset": e.offset} for e in self.entrances],
            "spawn": self.spawn,
        }
