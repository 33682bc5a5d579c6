"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

from tempo_app.engine import MissionTracker
from tempo_app.persistence.interval_store import IntervalStore
from tempo_app.state.models import Interval

BASE_TIME = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Timestamp ``seconds`` after the shared base time."""
    return BASE_TIME + timedelta(seconds=seconds)


class FakeClock:
    """Settable clock handed to MissionTracker."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def ts() -> Callable[[float], datetime]:
    """Factory for timestamps relative to the shared base time."""
    return at


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "tempo.db"


@pytest.fixture
def store(db_path: Path) -> IntervalStore:
    return IntervalStore(db_path)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(store: IntervalStore, clock: FakeClock) -> MissionTracker:
    return MissionTracker(store, clock=clock)


@pytest.fixture
def two_missions() -> list[Interval]:
    """Mission "a" stopped at t=10 and mission "b" stopped at t=20."""
    return [
        Interval(mission="a", start=at(0), end=at(10)),
        Interval(mission="b", start=at(12), end=at(20)),
    ]
