"""Tests for config loading, gate seeding and content overrides."""

import json

from ourstory.content import DEFAULT_CONTENT, load_content
from ourstory.logic import (
    DEFAULT_CONFIG,
    build_gate,
    load_config,
    load_story_content,
    save_config,
    set_gate_answers,
)
from ourstory.gate import ADVANCE, REJECT
from ourstory.models import Role


def test_first_load_seeds_hashed_gate(config_home) -> None:
    cfg = load_config()

    assert cfg["unlock_delay_seconds"] == DEFAULT_CONFIG["unlock_delay_seconds"]
    written = (config_home / "config.json").read_text(encoding="utf-8")
    assert "madurai" not in written
    assert "grenoble" not in written
    assert "$argon2" in written

    gate = build_gate(cfg)
    assert gate.submit(1, "2022").kind == ADVANCE
    assert gate.submit(2, "Madurai").role is Role.ELEVATED
    assert gate.submit(2, "grenoble").role is Role.STANDARD


def test_saved_values_override_defaults(config_home) -> None:
    save_config({"unlock_delay_seconds": 0.5})
    cfg = load_config()
    assert cfg["unlock_delay_seconds"] == 0.5
    assert cfg["max_image_width"] == 800
    assert "gate" in json.loads((config_home / "config.json").read_text(encoding="utf-8"))


def test_corrupt_config_falls_back_to_defaults(config_home) -> None:
    config_home.mkdir(parents=True)
    (config_home / "config.json").write_text("{not json", encoding="utf-8")
    cfg = load_config()
    assert cfg["max_image_width"] == 800
    assert build_gate(cfg).submit(1, "2022").kind == ADVANCE


def test_invalid_gate_section_is_reseeded(config_home) -> None:
    cfg = load_config()
    cfg["gate"] = {"year_hash": "x", "role_hashes": {"superuser": "y"}}
    gate = build_gate(cfg)
    assert gate.submit(1, "2022").kind == ADVANCE
    assert "superuser" not in json.dumps(load_config()["gate"])


def test_empty_gate_section_is_reseeded(config_home) -> None:
    cfg = load_config()
    cfg["gate"] = {}
    gate = build_gate(cfg)
    assert gate.submit(1, "2022").kind == ADVANCE
    assert gate.submit(2, "grenoble").role is Role.STANDARD
    assert load_config()["gate"]["year_hash"].startswith("$argon2")


def test_gate_section_missing_a_role_is_reseeded(config_home) -> None:
    cfg = load_config()
    del cfg["gate"]["role_hashes"]["elevated"]
    gate = build_gate(cfg)
    assert gate.submit(2, "madurai").role is Role.ELEVATED


def test_set_gate_answers(config_home) -> None:
    set_gate_answers("2019", "Paris", "Lyon")
    gate = build_gate(load_config())
    assert gate.submit(1, "2022").kind == REJECT
    assert gate.submit(1, "2019").kind == ADVANCE
    assert gate.submit(2, "lyon").role is Role.ELEVATED


def test_content_defaults_without_override(config_home) -> None:
    assert load_story_content() == DEFAULT_CONTENT
    assert DEFAULT_CONTENT.messages
    assert DEFAULT_CONTENT.timeline


def test_content_override(tmp_path) -> None:
    path = tmp_path / "content.json"
    path.write_text(json.dumps({"messages": ["only you"]}), encoding="utf-8")
    content = load_content(path)
    assert content.messages == ("only you",)
    assert content.timeline == DEFAULT_CONTENT.timeline


def test_bad_content_override_falls_back(tmp_path) -> None:
    path = tmp_path / "content.json"
    path.write_text(json.dumps({"timeline": [{"title": "no text"}]}), encoding="utf-8")
    assert load_content(path) == DEFAULT_CONTENT
    path.write_text(json.dumps({"messages": []}), encoding="utf-8")
    assert load_content(path) == DEFAULT_CONTENT
