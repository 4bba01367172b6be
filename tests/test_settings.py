from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest

from levelgen.config import GenerationSettings
from levelgen.errors import ConfigError


def test_defaults() -> None:
    s = GenerationSettings()
    assert s.accelerate_until == 4
    assert s.decelerate_at == 10
    assert s.max_step_attempts == 100_000
    assert s.number_of_teams == 3
    assert s.required_spawn_rooms == 2
    assert s.first_room_entrances == 8
    assert s.first_room_size == (7, 7)
    assert s.validate() is s


def test_env_overrides() -> None:
    env = {
        "LEVELGEN_SEED": "42",
        "LEVELGEN_ACCELERATE_UNTIL": "6",
        "LEVELGEN_TEAMS": "4",
        "LEVELGEN_MAX_RESETS": "10",
        "LEVELGEN_RESET_DELAY": "0",
        "LEVELGEN_FIRST_ROOM_SIZE": "5x5",
        "LEVELGEN_BUILTIN_TEMPLATES": "no",
        "LEVELGEN_USER_TEMPLATES": "on",
        "LEVELGEN_TEMPLATE_DIRS": os.pathsep.join(["packs/a", "packs/b"]),
    }
    s = GenerationSettings.from_env(env)

    assert s.seed == 42
    assert s.accelerate_until == 6
    assert s.number_of_teams == 4
    assert s.required_spawn_rooms == 3
    assert s.max_resets == 10
    assert s.reset_delay == 0.0
    assert s.first_room_size == (5, 5)
    assert s.use_builtin_templates is False
    assert s.use_user_templates is True
    assert s.template_dirs == ["packs/a", "packs/b"]


def test_env_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEVELGEN_SEED", "dungeon-7")
    monkeypatch.setenv("LEVELGEN_MAX_RESETS", "")
    s = GenerationSettings.from_env()
    assert s.seed == "dungeon-7"
    assert s.max_resets is None


def test_env_rejects_bad_boolean() -> None:
    with pytest.raises(ConfigError):
        GenerationSettings.from_env({"LEVELGEN_BUILTIN_TEMPLATES": "maybe"})


def test_env_rejects_bad_number() -> None:
    with pytest.raises(ConfigError):
        GenerationSettings.from_env({"LEVELGEN_ACCELERATE_UNTIL": "lots"})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"accelerate_until": 12},
        {"accelerate_until": 0},
        {"number_of_teams": 0},
        {"max_step_attempts": 0},
        {"max_resets": -1},
        {"reset_delay": -0.1},
    ],
)
def test_validate_rejects_inconsistent_values(kwargs) -> None:
    with pytest.raises(ConfigError):
        GenerationSettings(**kwargs).validate()


def test_unknown_keys_are_ignored_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        s = GenerationSettings.from_mapping({"accelerate_until": 2, "fog": True})
    assert s.accelerate_until == 2
    assert any("fog" in rec.message for rec in caplog.records)


def test_file_overrides(tmp_path: Path) -> None:
    fp = tmp_path / "levelgen.json"
    fp.write_text(
        json.dumps(
            {
                "seed": "arena",
                "accelerate_until": 3,
                "max_resets": None,
                "first_room_entrances": None,
                "first_room_size": [3, 3],
                "origin": [10, -4],
                "template_dirs": ["extra"],
            }
        ),
        encoding="utf-8",
    )
    s = GenerationSettings.from_json(fp)

    assert s.seed == "arena"
    assert s.accelerate_until == 3
    assert s.max_resets is None
    assert s.first_room_entrances is None
    assert s.first_room_size == (3, 3)
    assert s.origin == (10, -4)
    assert s.template_dirs == ["extra"]
    assert s.reset_delay == 0.5


def test_file_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        GenerationSettings.from_json(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        GenerationSettings.from_json(broken)

    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError):
        GenerationSettings.from_json(listing)


def test_bad_size_is_reported() -> None:
    with pytest.raises(ConfigError):
        GenerationSettings.from_mapping({"first_room_size": "7x7x7"})


def test_to_dict_round_trip() -> None:
    s = GenerationSettings(seed=3, max_resets=5)
    data = s.to_dict()
    assert data["seed"] == 3
    assert GenerationSettings.from_mapping(data) == s
