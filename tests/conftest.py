"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory SQLite)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class SteppingClock:
    """Deterministic clock that advances a fixed step on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def make_attempt():
    """Factory for Attempt objects with sensible defaults."""
    from src.core.attempt import Attempt

    def _make(
        accuracy=1,
        response_time=30,
        expected=40,
        timestamp=None,
        subject="DSA",
        topic="Arrays",
        **kwargs,
    ):
        return Attempt(
            accuracy=accuracy,
            response_time_seconds=response_time,
            expected_seconds=expected,
            timestamp=timestamp,
            subject=subject,
            topic=topic,
            **kwargs,
        )

    return _make


@pytest.fixture
def clock():
    """Clock starting Monday 2025-01-06 09:00 local time, one minute per call."""
    return SteppingClock(datetime(2025, 1, 6, 9, 0))


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with all tables created."""
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool

    from src.db.database import init_db

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the in-memory engine."""
    from sqlalchemy.orm import sessionmaker

    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def diagnostic_answers():
    """Eight of ten diagnostic answers correct (80% -> Intermediate)."""
    return [{"question_id": f"diag-{i}", "correct": i < 8} for i in range(10)]
