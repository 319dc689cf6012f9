"""Pytest configuration for the test suite.

Shared fixtures: temporary SQLite databases, the local stores built on them,
a controllable clock, result factories and a Flask test client.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from api.realtime import RealtimeHub
from app import create_app
from db.database_manager import DatabaseManager
from models.key_value_store import KeyValueStore
from models.result_archive import ResultArchive
from models.settings_manager import SettingsManager
from models.test_result import TestResult

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWallClock:
    """Manually advanced UTC wall clock."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wall_clock() -> FakeWallClock:
    return FakeWallClock()


@pytest.fixture(scope="function")
def db_manager(tmp_path: Path) -> Generator[DatabaseManager, None, None]:
    """A DatabaseManager on a temporary SQLite file with all tables created."""
    db = DatabaseManager(str(tmp_path / "practice.sqlite"))
    db.init_tables()
    yield db
    db.close()


@pytest.fixture
def store(db_manager: DatabaseManager) -> KeyValueStore:
    return KeyValueStore(db_manager=db_manager)


@pytest.fixture
def archive(store: KeyValueStore) -> ResultArchive:
    return ResultArchive(store=store)


@pytest.fixture
def settings_manager(store: KeyValueStore) -> SettingsManager:
    return SettingsManager(store=store)


@pytest.fixture
def make_result() -> Callable[..., TestResult]:
    """Factory for TestResult objects with sensible defaults."""

    def _make(**overrides: Any) -> TestResult:
        fields: dict[str, Any] = {
            "wpm": 50,
            "accuracy": 95,
            "errors": 2,
            "time_elapsed": 30.0,
            "characters_typed": 125,
            "characters_correct": 123,
            "text_source": "quotes",
            "text_length": "medium",
            "timestamp": BASE_TIME,
        }
        fields.update(overrides)
        return TestResult(**fields)

    return _make


@pytest.fixture
def hub() -> RealtimeHub:
    return RealtimeHub()


@pytest.fixture
def app(hub: RealtimeHub) -> Flask:
    """Backend app with a fresh in-memory store and an inspectable hub."""
    return create_app({"TESTING": True, "REALTIME_HUB": hub})


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()
