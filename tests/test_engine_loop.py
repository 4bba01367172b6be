from __future__ import annotations

import pytest

from levelgen.engine import GenerationLoop, LoopConfig
from levelgen.errors import GenerationExhaustedError, GenerationStalledError
from levelgen.generation import Phase, StepResult


class FakeGenerator:
    def __init__(self, outcomes, failure=None):
        self.outcomes = list(outcomes)
        self.result = None
        self.failure = failure
        self.phase = Phase.GROWING
        self.calls = 0

    def step(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if outcome is StepResult.DONE:
            self.result = "level"
        return outcome


def test_loop_runs_until_done():
    gen = FakeGenerator([StepResult.IN_PROGRESS] * 3 + [StepResult.DONE])
    loop = GenerationLoop(gen, LoopConfig(tick_rate=0))
    assert loop.run() == "level"
    assert loop.step == 4
    assert gen.calls == 4


def test_loop_raises_generator_failure():
    gen = FakeGenerator([StepResult.IN_PROGRESS, StepResult.FAILED], failure=GenerationExhaustedError("nope"))
    with pytest.raises(GenerationExhaustedError):
        GenerationLoop(gen).run()


def test_loop_gives_up_after_max_steps():
    gen = FakeGenerator([StepResult.IN_PROGRESS] * 10)
    loop = GenerationLoop(gen, LoopConfig(tick_rate=0, max_steps=5))
    with pytest.raises(GenerationStalledError):
        loop.run()
    assert loop.step == 5
