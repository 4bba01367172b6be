from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import ConfigError
from .teams import Team

logger = logging.getLogger(__name__)

ENV_PREFIX = "LEVELGEN_"


def _as_bool(value: Any) -> bool:
    """Interpret common truthy/falsey values into a bool.

    Accepts: True/False, 1/0, "true"/"false", "yes"/"no", "on"/"off" (case-insensitive).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"1", "true", "yes", "y", "on"}:
            return True
        if v in {"0", "false", "no", "n", "off"}:
            return False
        raise ConfigError(f"Not a boolean value: {value!r}")
    return bool(value)


def _as_seed(value: Any) -> Optional[Union[int, str]]:
    if value is None or isinstance(value, int):
        return value
    s = str(value).strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return s


def _as_size(value: Any) -> Optional[Tuple[int, int]]:
    if value is None:
        return None
    if isinstance(value, str):
        parts = value.lower().replace("x", ",").split(",")
    else:
        parts = list(value)
    if len(parts) != 2:
        raise ConfigError(f"Size must have two components, got {value!r}")
    return (int(parts[0]), int(parts[1]))


@dataclass
class GenerationSettings:
    """Settings for one level generator.

    - accelerate_until: room count below which the generator grows (multi-entrance rooms only).
      Don't make this bigger than decelerate_at.
    - decelerate_at: kept for tuning; the filling phase starts at accelerate_until.
    - number_of_teams: team slots including the neutral one; an attempt is accepted when it
      holds at least number_of_teams - 1 spawn-capable rooms.
    - max_step_attempts: samples one step may draw before it is reported as failed.
    - max_resets: cap on rejected attempts; None keeps retrying forever.
    - reset_delay: seconds to wait after a rejected attempt before starting over.
    - first_room_entrances / first_room_size: the template used to seed every attempt.
    - origin: world position of the level frame.

    Can be built from environment variables (prefix LEVELGEN_) or a JSON file.
    """

    seed: Optional[Union[int, str]] = None
    accelerate_until: int = 4
    decelerate_at: int = 10
    number_of_teams: int = len(Team)
    max_step_attempts: int = 100_000
    max_resets: Optional[int] = None
    reset_delay: float = 0.5
    first_room_entrances: Optional[int] = 8
    first_room_size: Optional[Tuple[int, int]] = (7, 7)
    origin: Tuple[int, int] = (0, 0)
    template_dirs: List[str] = field(default_factory=list)
    use_builtin_templates: bool = True
    use_user_templates: bool = False

    @property
    def required_spawn_rooms(self) -> int:
        return self.number_of_teams - 1

    def validate(self) -> "GenerationSettings":
        """Raise ConfigError on inconsistent values; returns self for chaining."""
        if self.accelerate_until < 1:
            raise ConfigError(f"accelerate_until must be >= 1, got {self.accelerate_until}")
        if self.accelerate_until > self.decelerate_at:
            raise ConfigError(
                f"accelerate_until ({self.accelerate_until}) must not exceed decelerate_at ({self.decelerate_at})"
            )
        if self.number_of_teams < 1:
            raise ConfigError(f"number_of_teams must be >= 1, got {self.number_of_teams}")
        if self.max_step_attempts < 1:
            raise ConfigError(f"max_step_attempts must be >= 1, got {self.max_step_attempts}")
        if self.max_resets is not None and self.max_resets < 0:
            raise ConfigError(f"max_resets must be >= 0 or None, got {self.max_resets}")
        if self.reset_delay < 0:
            raise ConfigError(f"reset_delay must be >= 0, got {self.reset_delay}")
        return self

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "GenerationSettings":
        """Build settings from a plain mapping. Missing fields fall back to defaults."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning("Ignoring unknown generation settings: %s", ", ".join(unknown))
        cfg = cls()
        try:
            if "seed" in raw:
                cfg.seed = _as_seed(raw["seed"])
            for name in ("accelerate_until", "decelerate_at", "number_of_teams", "max_step_attempts"):
                if name in raw:
                    setattr(cfg, name, int(raw[name]))
            if "max_resets" in raw:
                cfg.max_resets = None if raw["max_resets"] is None else int(raw["max_resets"])
            if "reset_delay" in raw:
                cfg.reset_delay = float(raw["reset_delay"])
            if "first_room_entrances" in raw:
                value = raw["first_room_entrances"]
                cfg.first_room_entrances = None if value is None else int(value)
            if "first_room_size" in raw:
                cfg.first_room_size = _as_size(raw["first_room_size"])
            if "origin" in raw:
                cfg.origin = _as_size(raw["origin"]) or (0, 0)
            if "template_dirs" in raw:
                cfg.template_dirs = [str(p) for p in raw["template_dirs"]]
            if "use_builtin_templates" in raw:
                cfg.use_builtin_templates = _as_bool(raw["use_builtin_templates"])
            if "use_user_templates" in raw:
                cfg.use_user_templates = _as_bool(raw["use_user_templates"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid generation settings: {e}") from e
        return cfg.validate()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GenerationSettings":
        """Read LEVELGEN_* variables, e.g. LEVELGEN_SEED=42, LEVELGEN_MAX_RESETS=10.

        LEVELGEN_TEMPLATE_DIRS uses the platform path separator.
        """
        env = os.environ if environ is None else environ
        raw: Dict[str, Any] = {}
        mapping = {
            "SEED": "seed",
            "ACCELERATE_UNTIL": "accelerate_until",
            "DECELERATE_AT": "decelerate_at",
            "TEAMS": "number_of_teams",
            "MAX_STEP_ATTEMPTS": "max_step_attempts",
            "MAX_RESETS": "max_resets",
            "RESET_DELAY": "reset_delay",
            "FIRST_ROOM_ENTRANCES": "first_room_entrances",
            "FIRST_ROOM_SIZE": "first_room_size",
            "BUILTIN_TEMPLATES": "use_builtin_templates",
            "USER_TEMPLATES": "use_user_templates",
        }
        for suffix, name in mapping.items():
            value = env.get(ENV_PREFIX + suffix)
            if value is not None and value != "":
                raw[name] = value
        dirs = env.get(ENV_PREFIX + "TEMPLATE_DIRS")
        if dirs:
            raw["template_dirs"] = [d for d in dirs.split(os.pathsep) if d]
        return cls.from_mapping(raw)

    @classmethod
    def from_json(cls, path: Path) -> "GenerationSettings":
        """Load settings from a JSON object file. Missing fields fallback to defaults."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        logger.info("Loaded generation settings from %s", path)
        return cls.from_mapping(raw)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
