"""
Pytest configuration for idbatch.

Provides fixtures for:
- Application settings with no per-chunk delay
- A fresh orchestrator per test
- An event recorder subscribed to that orchestrator
"""

from __future__ import annotations

import logging
from typing import Iterator, List

import pytest

from idbatch.config import Settings
from idbatch.orchestrator import BatchOrchestrator, JobEvent


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Undo any `configure_logging` call made by the code under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def app_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Yields are zero-length so chunk loops run as fast as the event loop allows.
    """
    return Settings(
        log_level="DEBUG",
        max_count=100_000,
        default_chunk_size=50,
        yield_seconds=0.0,
        failure_policy="tolerant",
    )


@pytest.fixture
def strict_settings(app_settings: Settings) -> Settings:
    return app_settings.model_copy(update={"failure_policy": "strict"})


@pytest.fixture
def orchestrator(app_settings: Settings) -> BatchOrchestrator:
    return BatchOrchestrator(app_settings=app_settings)


@pytest.fixture
def events(orchestrator: BatchOrchestrator) -> List[JobEvent]:
    """Every event the orchestrator publishes, in order."""
    recorded: List[JobEvent] = []
    orchestrator.subscribe(recorded.append)
    return recorded
