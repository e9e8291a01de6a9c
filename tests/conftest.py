"""Shared fixtures for the Gavel test suite."""

from __future__ import annotations

from typing import Callable

import pytest

from gavel.config import Settings, reset_settings
from gavel.engine.engine import GameEngine
from gavel.lib.models import GameTable, Intent
from gavel.lib.randomness import SystemRandomness


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, roll_steps=0)


@pytest.fixture
def engine(settings: Settings) -> GameEngine:
    return GameEngine(rng=SystemRandomness(1234), settings=settings)


@pytest.fixture
def table() -> GameTable:
    return GameTable()


@pytest.fixture
def play(engine: GameEngine) -> Callable[..., GameTable]:
    """Apply intents in order, failing the test on any rejection."""

    def _play(table: GameTable, *intents: Intent) -> GameTable:
        for intent in intents:
            result = engine.dispatch(table, intent)
            assert result.accepted, f"{intent.type} rejected: {result.reason}"
            table = result.table
        return table

    return _play
