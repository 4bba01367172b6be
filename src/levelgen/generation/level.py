from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from functools import reduce
from typing import Any, Callable, Dict, List, Optional

from ..config import GenerationSettings
from ..errors import GenerationExhaustedError, GenerationStalledError, LevelGenError
from ..geometry import Container, Point
from ..interfaces import RoomProtocol
from ..rng import RandomSource
from ..rooms import RoomLibrary, RoomTemplate
from ..teams import Team

logger = logging.getLogger(__name__)


class StepResult(Enum):
    IN_PROGRESS = "in_progress"
    DONE = "done"
    FAILED = "failed"


class Phase(Enum):
    GROWING = "growing"
    FILLING = "filling"
    RESETTING = "resetting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class LevelResult:
    """Hand-off for downstream match setup once a level is accepted."""

    rooms: List[RoomProtocol]
    spawn_rooms: Dict[Team, RoomProtocol]
    spawn_a: Optional[Point]
    spawn_b: Optional[Point]
    attempts: int
    seed: Optional[int] = None
    bounds: Optional[Container] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "attempts": self.attempts,
            "rooms": [
                {
                    "name": r.name,
                    "bounds": list(r.footprint.bounds(0)),
                    "entrances": r.entrance_count,
                    "spawn": r.is_spawn_capable,
                }
                for r in self.rooms
            ],
            "spawn_a": list(self.spawn_a.as_tuple()) if self.spawn_a else None,
            "spawn_b": list(self.spawn_b.as_tuple()) if self.spawn_b else None,
            "bounds": list(self.bounds.bounds(0)) if self.bounds is not None else None,
        }


class LevelGenerator:
    """Accretive room-by-room level generator driven one step at a time.

    Every attempt starts from a single first room at the level origin, then:
    - grows while fewer than ``accelerate_until`` rooms exist, sampling random
      multi-entrance templates so the frontier never closes early;
    - fills afterwards, trying one-entrance templates before anything larger,
      until no open entrance is left.

    A finished attempt is accepted when it holds enough spawn-capable rooms for
    every team; otherwise everything is discarded and a new attempt starts after
    ``reset_delay`` seconds. Hosts call ``step()`` repeatedly and stop on DONE or
    FAILED; readers should only look at ``current_rooms``/``spawn_rooms``
    between steps.
    """

    def __init__(
        self,
        library: RoomLibrary,
        settings: Optional[GenerationSettings] = None,
        rng: Optional[RandomSource] = None,
        on_complete: Optional[Callable[[LevelResult], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.library = library
        self.settings = (settings or GenerationSettings()).validate()
        self.rng = rng or library.rng
        self.on_complete = on_complete
        self._clock = clock

        self.world = Container()
        self.frame = Container(self.world, Point(*self.settings.origin))

        self.accelerate_until = self.settings.accelerate_until
        self.decelerate_at = self.settings.decelerate_at

        self.current_rooms: List[RoomProtocol] = []
        self.spawn_rooms: List[RoomProtocol] = []
        self.spawn: Dict[Team, RoomProtocol] = {}
        self.done = False
        self.result: Optional[LevelResult] = None
        self.failure: Optional[LevelGenError] = None

        self.generation_count = 0
        self.attempt = 0
        self.resets = 0
        self._started = False
        self._resume_at: Optional[float] = None

    # ---------------------------
    # State
    # ---------------------------

    @property
    def phase(self) -> Phase:
        if self.done:
            return Phase.DONE
        if self.failure is not None:
            return Phase.FAILED
        if self._resume_at is not None:
            return Phase.RESETTING
        if len(self.current_rooms) < self.accelerate_until:
            return Phase.GROWING
        return Phase.FILLING

    def available_entrances(self) -> int:
        return sum(room.available_entrances() for room in self.current_rooms)

    def update_available_entrances_all(self) -> None:
        """Refresh every room's open-entrance count. Loops over every room pair."""
        for room in self.current_rooms:
            room.update_available_entrances(self.current_rooms)

    def bounds(self) -> Optional[Container]:
        """World-frame bounding box of all placed rooms, or None before the first room exists."""
        if not self.current_rooms:
            return None
        return reduce(lambda acc, c: acc.join(c), (r.footprint.to_depth(0) for r in self.current_rooms))

    # ---------------------------
    # Driver
    # ---------------------------

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.attempt = 1
        logger.info("Level generation started (seed=%s)", getattr(self.rng, "effective_seed", None))
        self._create_first_room()

    def step(self) -> StepResult:
        """Run one generation step: a phase placement, then the completion check."""
        if self.done:
            return StepResult.DONE
        if self.failure is not None:
            return StepResult.FAILED
        if not self._started:
            self.start()

        if self._resume_at is not None:
            if self._clock() < self._resume_at:
                return StepResult.IN_PROGRESS
            self._resume_at = None
            self._reset()
            return StepResult.IN_PROGRESS

        if len(self.current_rooms) < self.accelerate_until:
            placed = self._grow()
        else:
            placed = self._fill()
        if not placed:
            return StepResult.FAILED

        if self.available_entrances() == 0:
            return self._complete_attempt()
        return StepResult.IN_PROGRESS

    def run(self, max_steps: Optional[int] = None) -> LevelResult:
        """Drive ``step()`` until the level is accepted.

        Raises GenerationStalledError / GenerationExhaustedError on failure.
        """
        from ..engine.loop import GenerationLoop, LoopConfig

        return GenerationLoop(self, LoopConfig(tick_rate=0, max_steps=max_steps)).run()

    # ---------------------------
    # Attempt lifecycle
    # ---------------------------

    def _create_first_room(self) -> None:
        template = self._first_template()
        room = template.instantiate(self.frame, self.rng)
        self._add_room(room)
        logger.debug("Attempt %d seeded with %s", self.attempt, room)

    def _first_template(self) -> RoomTemplate:
        entrances = self.settings.first_room_entrances
        size = self.settings.first_room_size
        if entrances is not None and size is not None:
            template = self.library.get_random(entrances, size)
            if template is not None:
                return template
            logger.warning(
                "No first room with %d entrances and size %s; using a random %d-entrance room",
                entrances,
                size,
                self.library.entrance_max,
            )
        return self.rng.choice(self.library.get(self.library.entrance_max))

    def _add_room(self, room: RoomProtocol) -> None:
        self.current_rooms.append(room)
        if room.is_spawn_capable:
            self.spawn_rooms.append(room)
        self.update_available_entrances_all()

    def _complete_attempt(self) -> StepResult:
        logger.info(
            "Level generation attempt %d done. %d rooms, %d viable spawn rooms.",
            self.attempt,
            len(self.current_rooms),
            len(self.spawn_rooms),
        )
        if len(self.spawn_rooms) >= self.settings.required_spawn_rooms:
            self._finalize()
            return StepResult.DONE

        max_resets = self.settings.max_resets
        if max_resets is not None and self.resets >= max_resets:
            self.failure = GenerationExhaustedError(
                f"Level rejected {self.resets + 1} time(s); giving up after max_resets={max_resets}"
            )
            logger.error("%s", self.failure)
            return StepResult.FAILED

        logger.info(
            "Rejecting attempt %d: need %d spawn rooms, got %d",
            self.attempt,
            self.settings.required_spawn_rooms,
            len(self.spawn_rooms),
        )
        if self.settings.reset_delay > 0:
            self._resume_at = self._clock() + self.settings.reset_delay
        else:
            self._reset()
        return StepResult.IN_PROGRESS

    def _reset(self) -> None:
        # Drop every room of the old attempt before the new first room exists.
        self.current_rooms = []
        self.spawn_rooms = []
        self.spawn = {}
        self.done = False
        self.generation_count = 0
        self.resets += 1
        self.attempt += 1
        self._create_first_room()

    def _finalize(self) -> None:
        self.done = True
        spawn_a, spawn_b = self._assign_spawn_rooms()
        self.result = LevelResult(
            rooms=list(self.current_rooms),
            spawn_rooms=dict(self.spawn),
            spawn_a=spawn_a,
            spawn_b=spawn_b,
            attempts=self.attempt,
            seed=getattr(self.rng, "effective_seed", None),
            bounds=self.bounds(),
        )
        logger.info("Level accepted after %d attempt(s): SpawnA=%s SpawnB=%s", self.attempt, spawn_a, spawn_b)
        if self.on_complete is not None:
            self.on_complete(self.result)

    def _assign_spawn_rooms(self) -> tuple[Optional[Point], Optional[Point]]:
        """Pick the two spawn rooms whose centers are furthest apart.

        Pairs are scanned in list order with a strict comparison, so the first
        maximum found wins ties.
        """
        if not self.spawn_rooms:
            logger.warning("Level accepted without spawn rooms; no spawn anchors assigned")
            return None, None

        best_a = best_b = self.spawn_rooms[0]
        best = 0.0
        count = len(self.spawn_rooms)
        for i in range(count):
            for j in range(i, count):
                distance = self.spawn_rooms[i].center.distance_to(self.spawn_rooms[j].center)
                if distance > best:
                    best = distance
                    best_a, best_b = self.spawn_rooms[i], self.spawn_rooms[j]

        self.spawn = {Team.A: best_a, Team.B: best_b}
        return best_a.spawn_anchor, best_b.spawn_anchor

    # ---------------------------
    # Phases
    # ---------------------------

    def _place(self, template: RoomTemplate) -> bool:
        self.generation_count += 1
        room = template.instantiate(self.frame, self.rng)
        if room.try_add(self.current_rooms):
            self._add_room(room)
            return True
        return False

    def _stall(self, phase: str) -> bool:
        self.failure = GenerationStalledError(
            f"We ran {phase} {self.settings.max_step_attempts} times but could not find a room"
        )
        logger.error("%s", self.failure)
        return False

    def _grow(self) -> bool:
        """Place one random room with at least two entrances."""
        entrance_max = self.library.entrance_max
        if entrance_max < 2:
            return self._stall("grow")
        count = 0
        while True:
            count += 1
            if count > self.settings.max_step_attempts:
                return self._stall("grow")
            entrances = self.rng.randint(2, entrance_max)
            size = self.rng.randint(1, self.library.size_max)
            template = self.library.get_random(entrances, (size, size))
            if template is not None and self._place(template):
                return True

    def _fill(self) -> bool:
        """Place one room, preferring the fewest entrances and the latest-added templates.

        Every template tried counts as one sample towards ``max_step_attempts``.
        """
        candidates = [
            template
            for entrances in range(1, self.library.entrance_max + 1)
            for template in reversed(self.library.get(entrances))
        ]
        count = 0
        while True:
            for template in candidates:
                count += 1
                if count > self.settings.max_step_attempts:
                    return self._stall("fill")
                if self._place(template):
                    return True
