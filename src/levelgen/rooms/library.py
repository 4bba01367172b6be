from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..errors import CatalogEmptyError
from ..rng import RandomSource
from .template import RoomTemplate, Size

logger = logging.getLogger(__name__)


class RoomLibrary:
    """Catalog of room templates indexed by entrance count, then by size.

        {entrance_count: {(width, height): [template, ...]}}

    Entrance count comes first so a caller can efficiently ask for "any room
    with N entrances"; size comes second so it can then pick a footprint.
    The innermost list keeps insertion order, and ``get_random`` picks from it
    with the injected RandomSource so catalog lookups are reproducible.
    """

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self.rng = rng or RandomSource()
        self._rooms: Dict[int, Dict[Size, List[RoomTemplate]]] = {}
        self._by_entrance: Dict[int, List[RoomTemplate]] = {}
        self.entrance_max = 0
        self.size_max = 0
        self._count = 0

    @classmethod
    def from_templates(cls, templates: Iterable[RoomTemplate], rng: Optional[RandomSource] = None) -> "RoomLibrary":
        library = cls(rng)
        for template in templates:
            library.add(template)
        if not library:
            raise CatalogEmptyError("No room templates found!")
        logger.info("Room library loaded: %s", library.describe())
        return library

    def add(self, template: RoomTemplate) -> None:
        by_size = self._rooms.setdefault(template.entrance_count, {})
        by_size.setdefault(template.size, []).append(template)
        self._by_entrance.setdefault(template.entrance_count, []).append(template)
        self._count += 1
        if template.entrance_count > self.entrance_max:
            self.entrance_max = template.entrance_count
        if max(template.size) > self.size_max:
            self.size_max = max(template.size)

    def get(self, entrance_count: int) -> List[RoomTemplate]:
        """All templates with exactly ``entrance_count`` entrances, across every size, in insertion order."""
        return list(self._by_entrance.get(entrance_count, []))

    def get_random(self, entrance_count: int, size: Size) -> Optional[RoomTemplate]:
        """A uniformly chosen template matching both keys, or None when nothing matches."""
        templates = self._rooms.get(entrance_count, {}).get(tuple(size))
        if not templates:
            return None
        return self.rng.choice(templates)

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[RoomTemplate]:
        for by_size in self._rooms.values():
            for templates in by_size.values():
                yield from templates

    def describe(self) -> str:
        parts = []
        for entrances in sorted(self._rooms):
            sizes = ", ".join(
                f"{w}x{h}:{len(ts)}" for (w, h), ts in sorted(self._rooms[entrances].items())
            )
            parts.append(f"{entrances} entrance(s) [{sizes}]")
        return (
            f"{self._count} templates, entrance_max={self.entrance_max}, size_max={self.size_max}; "
            + "; ".join(parts)
        )
