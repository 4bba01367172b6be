from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..errors import GenerationStalledError

if TYPE_CHECKING:
    from ..generation.level import LevelGenerator, LevelResult

logger = logging.getLogger(__name__)

RESET_POLL_SECONDS = 0.01


@dataclass
class LoopConfig:
    """Configuration for the headless generation loop.

    Attributes:
        tick_rate: Target steps per second. If 0 or None, steps as fast as possible.
        max_steps: If provided and > 0, the loop gives up after this many steps.
    """

    tick_rate: Optional[float] = 0.0
    max_steps: Optional[int] = None


class GenerationLoop:
    """A minimal host loop calling ``LevelGenerator.step()`` until it settles.

    This isolates the step-driven generator from any per-frame mechanism so it
    can be run from a CLI or tests, or be replaced by a game's own tick.
    """

    def __init__(self, generator: "LevelGenerator", config: Optional[LoopConfig] = None) -> None:
        self.generator = generator
        self.config = config or LoopConfig()
        self._step = 0

    @property
    def step(self) -> int:
        return self._step

    def run(self) -> "LevelResult":
        """Run until the level is accepted.

        Raises the generator's failure (GenerationStalledError or
        GenerationExhaustedError), or GenerationStalledError when max_steps runs out.
        """
        from ..generation.level import Phase, StepResult

        target_dt = 0.0
        if self.config.tick_rate and self.config.tick_rate > 0:
            target_dt = 1.0 / float(self.config.tick_rate)
        max_steps = self.config.max_steps

        logger.info("Generation loop started (tick_rate=%s, max_steps=%s)", self.config.tick_rate, max_steps)
        while True:
            if max_steps is not None and max_steps > 0 and self._step >= max_steps:
                raise GenerationStalledError(f"Level not finished after {self._step} steps")

            now = time.perf_counter()
            result = self.generator.step()
            self._step += 1

            if result is StepResult.DONE:
                logger.info("Loop complete (steps=%d)", self._step)
                return self.generator.result  # type: ignore[return-value]
            if result is StepResult.FAILED:
                failure = self.generator.failure or GenerationStalledError("Level generation failed")
                raise failure

            if target_dt > 0:
                remaining = target_dt - (time.perf_counter() - now)
                if remaining > 0:
                    time.sleep(remaining)
            elif self.generator.phase is Phase.RESETTING:
                time.sleep(RESET_POLL_SECONDS)
