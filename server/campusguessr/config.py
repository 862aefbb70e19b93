"""Server configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: CAMPUSGUESSR_<SECTION>_<KEY> (uppercase).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from campusguessr.core.models import Point, Target


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    env: str = "dev"  # "dev" or "prod"


@dataclass
class GameConfig:
    # Ground truth for photos missing a location or floor.
    # With fallback disabled such photos count as a failed load.
    fallback_enabled: bool = True
    fallback_x: float = 50.0
    fallback_y: float = 50.0
    fallback_floor: int = 1
    floors: list[int] = field(default_factory=lambda: [1, 2, 3, 4])
    session_idle_seconds: float = 3600.0
    max_sessions: int = 10_000

    def fallback_target(self) -> Target | None:
        if not self.fallback_enabled:
            return None
        return Target(
            location=Point(x=float(self.fallback_x), y=float(self.fallback_y)),
            floor=int(self.fallback_floor),
        )


@dataclass
class ProviderConfig:
    backend: str = "sample"  # "sample" or "file"
    catalog_path: str = "data/catalog.jsonl"
    seed: int | None = None


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    game: GameConfig = field(default_factory=GameConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_floors(value: str) -> list[int]:
    return [int(f) for f in value.split(",") if f.strip()]


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "CAMPUSGUESSR_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "CAMPUSGUESSR_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "CAMPUSGUESSR_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "CAMPUSGUESSR_GAME_FALLBACK_ENABLED": lambda v: setattr(config.game, "fallback_enabled", _parse_bool(v)),
        "CAMPUSGUESSR_GAME_FALLBACK_X": lambda v: setattr(config.game, "fallback_x", float(v)),
        "CAMPUSGUESSR_GAME_FALLBACK_Y": lambda v: setattr(config.game, "fallback_y", float(v)),
        "CAMPUSGUESSR_GAME_FALLBACK_FLOOR": lambda v: setattr(config.game, "fallback_floor", int(v)),
        "CAMPUSGUESSR_GAME_FLOORS": lambda v: setattr(config.game, "floors", _parse_floors(v)),
        "CAMPUSGUESSR_GAME_SESSION_IDLE_SECONDS": lambda v: setattr(config.game, "session_idle_seconds", float(v)),
        "CAMPUSGUESSR_GAME_MAX_SESSIONS": lambda v: setattr(config.game, "max_sessions", int(v)),
        "CAMPUSGUESSR_PROVIDER_BACKEND": lambda v: setattr(config.provider, "backend", v),
        "CAMPUSGUESSR_PROVIDER_CATALOG_PATH": lambda v: setattr(config.provider, "catalog_path", v),
        "CAMPUSGUESSR_PROVIDER_SEED": lambda v: setattr(config.provider, "seed", int(v)),
        "CAMPUSGUESSR_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "CAMPUSGUESSR_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    # Try to load YAML
    if config_path is None:
        config_path = Path(os.environ.get("CAMPUSGUESSR_CONFIG", "config.yaml"))
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in ("server", "game", "provider", "logging"):
            target = getattr(config, section)
            for k, v in (raw.get(section) or {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
