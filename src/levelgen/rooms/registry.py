from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from platformdirs import PlatformDirs

from ..config import GenerationSettings
from ..errors import CatalogEmptyError, TemplateError
from ..rng import RandomSource
from ..utils.json_loader import JsonLoaderError, load_json_directory, load_json_file, loads_validated
from .library import RoomLibrary
from .template import RoomTemplate

logger = logging.getLogger(__name__)

APP_NAME = "levelgen"
BUILTIN_PACKAGE = "levelgen.data"
BUILTIN_PACK = "rooms.json"

ROOM_TEMPLATE_PACK_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["templates"],
    "properties": {
        "pack": {"type": "string", "default": "unnamed"},
        "templates": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "width", "height", "entrances"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "width": {"type": "integer", "minimum": 1},
                    "height": {"type": "integer", "minimum": 1},
                    "spawn": {"type": "boolean", "default": False},
                    "entrances": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["side"],
                            "properties": {
                                "side": {"enum": ["east", "north", "west", "south"]},
                                "offset": {"type": "integer", "minimum": 0, "default": 0},
                            },
                            "additionalProperties": False,
                        },
                    },
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}


class TemplateRegistry:
    """Explicit registration list of room templates.

    Templates are registered by hand or from JSON template packs; names must be
    unique across everything registered. Registration order is preserved and is
    the insertion order the catalog sees.
    """

    def __init__(self) -> None:
        self._templates: Dict[str, RoomTemplate] = {}

    def register(self, template: RoomTemplate) -> RoomTemplate:
        if template.name in self._templates:
            raise TemplateError(f"Room template '{template.name}' is already registered")
        self._templates[template.name] = template
        logger.debug("Registered room template '%s' (%d entrances, %dx%d)", template.name,
                     template.entrance_count, template.width, template.height)
        return template

    def register_all(self, templates: Iterable[RoomTemplate]) -> None:
        for template in templates:
            self.register(template)

    def register_pack(self, data: Mapping[str, Any], source: Union[str, Path]) -> int:
        """Register every template of an already validated pack object; returns how many."""
        templates = [RoomTemplate.from_dict(item) for item in data["templates"]]
        self.register_all(templates)
        logger.info("Loaded %d room template(s) from pack '%s' (%s)", len(templates), data.get("pack"), source)
        return len(templates)

    def load_file(self, path: Union[str, Path]) -> int:
        try:
            data = load_json_file(path, schema=ROOM_TEMPLATE_PACK_SCHEMA)
        except JsonLoaderError as e:
            raise TemplateError(str(e)) from e
        return self.register_pack(data, path)

    def load_directory(self, path: Union[str, Path]) -> int:
        try:
            packs = load_json_directory(path, schema=ROOM_TEMPLATE_PACK_SCHEMA)
        except JsonLoaderError as e:
            raise TemplateError(str(e)) from e
        return sum(self.register_pack(data, fp) for fp, data in packs.items())

    def get(self, name: str) -> Optional[RoomTemplate]:
        return self._templates.get(name)

    def templates(self) -> List[RoomTemplate]:
        return list(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[RoomTemplate]:
        return iter(self.templates())


def builtin_templates() -> List[RoomTemplate]:
    """Templates shipped with the package (levelgen/data/rooms.json)."""
    text = resources.files(BUILTIN_PACKAGE).joinpath(BUILTIN_PACK).read_text(encoding="utf-8")
    try:
        data = loads_validated(text, source=f"{BUILTIN_PACKAGE}/{BUILTIN_PACK}", schema=ROOM_TEMPLATE_PACK_SCHEMA)
    except JsonLoaderError as e:
        raise TemplateError(str(e)) from e
    return [RoomTemplate.from_dict(item) for item in data["templates"]]


def user_template_dir() -> Path:
    """Per-user directory scanned for extra template packs when enabled."""
    return Path(PlatformDirs(APP_NAME).user_data_dir) / "rooms"


def build_registry(settings: GenerationSettings) -> TemplateRegistry:
    registry = TemplateRegistry()
    if settings.use_builtin_templates:
        registry.register_all(builtin_templates())
    for directory in settings.template_dirs:
        registry.load_directory(directory)
    if settings.use_user_templates:
        user_dir = user_template_dir()
        if user_dir.is_dir():
            registry.load_directory(user_dir)
        else:
            logger.info("User template directory %s does not exist; skipping", user_dir)
    return registry


def build_library(settings: GenerationSettings, rng: Optional[RandomSource] = None) -> RoomLibrary:
    """Assemble the room catalog for ``settings``.

    Raises CatalogEmptyError when no source yields a single template.
    """
    registry = build_registry(settings)
    if not len(registry):
        raise CatalogEmptyError("No room templates found! Enable the builtin pack or add template directories.")
    return RoomLibrary.from_templates(registry, rng)
