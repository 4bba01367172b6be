import json
from pathlib import Path

import pytest

from levelgen.config import GenerationSettings
from levelgen.errors import CatalogEmptyError, TemplateError
from levelgen.rng import RandomSource
from levelgen.rooms import Entrance, RoomTemplate, Side, TemplateRegistry, build_library, builtin_templates
from levelgen.rooms import registry as registry_mod


def write_pack(path: Path, templates, pack="test"):
    path.write_text(json.dumps({"pack": pack, "templates": templates}), encoding="utf-8")


def test_template_rejects_zero_size():
    with pytest.raises(TemplateError):
        RoomTemplate("flat", 0, 3, ())


def test_template_rejects_offset_outside_side():
    with pytest.raises(TemplateError) as ei:
        RoomTemplate("hall", 5, 3, (Entrance(Side.EAST, 3),))
    assert "outside side length 3" in str(ei.value)
    # NORTH spans the width
    RoomTemplate("hall", 5, 3, (Entrance(Side.NORTH, 4),))


def test_template_rejects_duplicate_entrance():
    with pytest.raises(TemplateError):
        RoomTemplate("twin", 3, 3, (Entrance(Side.WEST, 1), Entrance(Side.WEST, 1)))


def test_template_dict_round_trip():
    data = {
        "name": "bend",
        "width": 3,
        "height": 3,
        "entrances": [{"side": "west", "offset": 1}, {"side": "north", "offset": 1}],
        "spawn": True,
    }
    template = RoomTemplate.from_dict(data)
    assert template.entrances == (Entrance(Side.WEST, 1), Entrance(Side.NORTH, 1))
    assert template.spawn is True
    assert template.to_dict() == data


def test_template_from_dict_reports_bad_side():
    with pytest.raises(TemplateError):
        RoomTemplate.from_dict({"name": "x", "width": 1, "height": 1, "entrances": [{"side": "up"}]})


def test_builtin_pack_loads():
    templates = builtin_templates()
    names = [t.name for t in templates]
    assert names[0] == "closet"
    assert "atrium" in names
    atrium = next(t for t in templates if t.name == "atrium")
    assert atrium.entrance_count == 8 and atrium.size == (7, 7)
    assert sum(1 for t in templates if t.spawn) >= 2
    # Schema defaults are applied
    closet = templates[0]
    assert closet.entrances == (Entrance(Side.WEST, 0),)
    assert closet.spawn is False


def test_registry_rejects_duplicate_names():
    reg = TemplateRegistry()
    reg.register(RoomTemplate("a", 1, 1, ()))
    with pytest.raises(TemplateError):
        reg.register(RoomTemplate("a", 2, 2, ()))
    assert len(reg) == 1
    assert reg.get("a").size == (1, 1)
    assert reg.get("missing") is None


def test_registry_loads_directory_in_sorted_order(tmp_path: Path):
    write_pack(tmp_path / "b.json", [{"name": "second", "width": 1, "height": 1, "entrances": [{"side": "west"}]}])
    write_pack(tmp_path / "a.json", [{"name": "first", "width": 2, "height": 2, "entrances": []}])
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    reg = TemplateRegistry()
    assert reg.load_directory(tmp_path) == 2
    assert [t.name for t in reg] == ["first", "second"]


def test_registry_wraps_schema_errors(tmp_path: Path):
    write_pack(tmp_path / "bad.json", [{"name": "oops", "width": 0, "height": 1, "entrances": []}])
    with pytest.raises(TemplateError) as ei:
        TemplateRegistry().load_file(tmp_path / "bad.json")
    assert "Schema validation failed" in str(ei.value)


def test_registry_wraps_missing_directory(tmp_path: Path):
    with pytest.raises(TemplateError):
        TemplateRegistry().load_directory(tmp_path / "nope")


def test_build_library_combines_sources(tmp_path: Path):
    write_pack(tmp_path / "extra.json", [{"name": "vault", "width": 9, "height": 9, "entrances": [{"side": "north", "offset": 4}]}])
    settings = GenerationSettings(template_dirs=[str(tmp_path)])
    library = build_library(settings, RandomSource(1))
    assert library.size_max == 9
    assert any(t.name == "vault" for t in library)
    assert len(library) == len(builtin_templates()) + 1


def test_build_library_without_templates_raises():
    settings = GenerationSettings(use_builtin_templates=False)
    with pytest.raises(CatalogEmptyError):
        build_library(settings, RandomSource(1))


def test_user_template_dir_is_optional(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog):
    monkeypatch.setattr(registry_mod, "user_template_dir", lambda: tmp_path / "missing")
    settings = GenerationSettings(use_user_templates=True)
    caplog.set_level("INFO")
    library = build_library(settings, RandomSource(1))
    assert len(library) == len(builtin_templates())
    assert any("does not exist" in rec.message for rec in caplog.records)


def test_user_template_dir_is_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    write_pack(tmp_path / "mine.json", [{"name": "den", "width": 2, "height": 2, "entrances": [{"side": "east"}]}])
    monkeypatch.setattr(registry_mod, "user_template_dir", lambda: tmp_path)
    settings = GenerationSettings(use_builtin_templates=False, use_user_templates=True)
    library = build_library(settings, RandomSource(1))
    assert [t.name for t in library] == ["den"]
