"""Shared pytest fixtures."""
from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from config import EngineConfig
from database.database_manager import DatabaseManager
from engine import ActivityEngine
from models import FocusSample

# A Wednesday, inside work hours
NOON = datetime(2024, 1, 10, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOON


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(config, clock) -> ActivityEngine:
    return ActivityEngine(config, clock=clock)


@pytest.fixture
def sample_at(now):
    """Build a sample `seconds` after the fixed clock."""
    def _make(app, title, seconds=0.0, url=None):
        return FocusSample(app=app, title=title, url=url, timestamp=now + timedelta(seconds=seconds))
    return _make


@pytest.fixture
def db_manager(tmp_path: Path) -> DatabaseManager:
    """File-backed SQLite so every session sees the same data."""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'test.db'}")
    yield manager
    manager.engine.dispose()
