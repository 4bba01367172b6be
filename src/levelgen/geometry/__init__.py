from .point import ORIGIN, Point
from .container import Container

__all__ = ["ORIGIN", "Point", "Container"]
