from enum import Enum


class Team(Enum):
    """Team slots known to the match. NEUTRAL never receives a spawn room."""

    NEUTRAL = "neutral"
    A = "a"
    B = "b"
