from .entrance import Entrance, Side
from .template import RoomTemplate
from .room import Room
from .library import RoomLibrary
from .registry import TemplateRegistry, build_library, builtin_templates

__all__ = [
    "Entrance",
    "Side",
    "RoomTemplate",
    "Room",
    "RoomLibrary",
    "TemplateRegistry",
    "build_library",
    "builtin_templates",
]
