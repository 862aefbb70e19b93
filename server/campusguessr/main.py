"""CampusGuessr server — main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, the location provider, and the API layers.
"""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from campusguessr.api.monitoring import router as monitoring_router
from campusguessr.api.sessions import router as sessions_router
from campusguessr.config import AppConfig, load_config
from campusguessr.core.registry import SessionRegistry
from campusguessr.core.stats import GameStats
from campusguessr.provider.base import LocationProvider
from campusguessr.provider.file_provider import FileLocationProvider
from campusguessr.provider.sample_provider import SampleLocationProvider

log = structlog.get_logger()

# Module-level singletons (set during startup)
_registry: SessionRegistry | None = None
_stats: GameStats | None = None
_config: AppConfig | None = None


def get_registry() -> SessionRegistry:
    assert _registry is not None, "Server not initialized"
    return _registry


def get_stats() -> GameStats:
    assert _stats is not None, "Server not initialized"
    return _stats


def get_config() -> AppConfig:
    assert _config is not None, "Server not initialized"
    return _config


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


def build_provider(config: AppConfig) -> LocationProvider:
    """Create the location provider selected by ``provider.backend``."""
    rng = random.Random(config.provider.seed)
    backend = config.provider.backend
    if backend == "file":
        return FileLocationProvider(config.provider.catalog_path, rng=rng)
    if backend == "sample":
        return SampleLocationProvider(rng=rng)
    raise ValueError(f"unknown provider backend: {backend!r}")


def build_registry(config: AppConfig, provider: LocationProvider, stats: GameStats) -> SessionRegistry:
    return SessionRegistry(
        provider,
        stats,
        fallback_target=config.game.fallback_target(),
        idle_seconds=config.game.session_idle_seconds,
        max_sessions=config.game.max_sessions,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _registry, _stats, _config

    _config = load_config()
    _setup_logging(_config)

    log.info("server_starting",
             env=_config.server.env,
             provider=_config.provider.backend,
             fallback_enabled=_config.game.fallback_enabled)

    _stats = GameStats(active_window_seconds=_config.game.session_idle_seconds)
    provider = build_provider(_config)
    _registry = build_registry(_config, provider, _stats)

    log.info("server_started",
             host=_config.server.host,
             port=_config.server.port)

    yield

    log.info("server_stopped", sessions=len(_registry))


app = FastAPI(
    title="CampusGuessr",
    description="Campus photo location guessing game server",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(sessions_router)
app.include_router(monitoring_router)
