from .level import LevelGenerator, LevelResult, Phase, StepResult
from .factory import LevelFactory

__all__ = ["LevelGenerator", "LevelResult", "Phase", "StepResult", "LevelFactory"]
