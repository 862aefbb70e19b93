"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from campusguessr.config import AppConfig, load_config
from campusguessr.core.models import Point, Target
from campusguessr.main import build_provider
from campusguessr.provider.file_provider import FileLocationProvider
from campusguessr.provider.sample_provider import SampleLocationProvider


def test_defaults(tmp_path):
    config = load_config(tmp_path / "missing.yaml")
    assert config.provider.backend == "sample"
    assert config.game.floors == [1, 2, 3, 4]
    assert config.game.fallback_target() == Target(location=Point(50, 50), floor=1)


def test_yaml_sections(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n"
        "  port: 9000\n"
        "game:\n"
        "  fallback_floor: 2\n"
        "  floors: [0, 1, 2]\n"
        "  unknown_key: ignored\n"
        "provider:\n"
        "  backend: file\n"
        "  catalog_path: /srv/catalog.jsonl\n"
        "logging:\n"
        "  format: json\n"
    )
    config = load_config(path)
    assert config.server.port == 9000
    assert config.game.fallback_floor == 2
    assert config.game.floors == [0, 1, 2]
    assert not hasattr(config.game, "unknown_key")
    assert config.provider.backend == "file"
    assert config.provider.catalog_path == "/srv/catalog.jsonl"
    assert config.logging.format == "json"


def test_env_overrides_win(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("server:\n  port: 9000\n")
    monkeypatch.setenv("CAMPUSGUESSR_SERVER_PORT", "9100")
    monkeypatch.setenv("CAMPUSGUESSR_GAME_FALLBACK_ENABLED", "false")
    monkeypatch.setenv("CAMPUSGUESSR_GAME_FLOORS", "1,2,3")
    monkeypatch.setenv("CAMPUSGUESSR_PROVIDER_SEED", "42")

    config = load_config(path)
    assert config.server.port == 9100
    assert config.game.fallback_enabled is False
    assert config.game.fallback_target() is None
    assert config.game.floors == [1, 2, 3]
    assert config.provider.seed == 42


def test_build_provider():
    config = AppConfig()
    assert isinstance(build_provider(config), SampleLocationProvider)
    config.provider.backend = "file"
    assert isinstance(build_provider(config), FileLocationProvider)
    config.provider.backend = "firestore"
    with pytest.raises(ValueError):
        build_provider(config)
