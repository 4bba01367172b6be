from __future__ import annotations

import logging
from typing import Callable, Optional

from ..config import GenerationSettings
from ..rng import RandomSource
from ..rooms.registry import build_library
from .level import LevelGenerator, LevelResult

logger = logging.getLogger(__name__)


class LevelFactory:
    """Factory wiring settings, randomness and the room catalog into a generator.

    Usage:
      settings = GenerationSettings.from_env()
      result = LevelFactory.generate(settings)
    """

    @staticmethod
    def build_generator(
        settings: GenerationSettings,
        rng: Optional[RandomSource] = None,
        on_complete: Optional[Callable[[LevelResult], None]] = None,
    ) -> LevelGenerator:
        settings.validate()
        rng = rng or RandomSource(settings.seed)
        library = build_library(settings, rng)
        logger.info(
            "LevelFactory: accelerate_until=%d, teams=%d, max_resets=%s",
            settings.accelerate_until,
            settings.number_of_teams,
            settings.max_resets,
        )
        return LevelGenerator(library, settings, rng, on_complete=on_complete)

    @staticmethod
    def generate(settings: GenerationSettings, max_steps: Optional[int] = None) -> LevelResult:
        return LevelFactory.build_generator(settings).run(max_steps=max_steps)
