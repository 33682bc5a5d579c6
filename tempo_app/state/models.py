"""
Mission state machine data models.

This module defines immutable data structures for interval records, the
derived session state and the results produced by transitions and reads.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..utils.time import elapsed_between


class SessionPhase(str, Enum):
    """Session states of the tracker."""
    IDLE = "idle"
    RUNNING = "running"


class Trigger(str, Enum):
    """Commands that cause a state transition."""
    START = "start"
    STOP = "stop"
    RESUME = "resume"


@dataclass(frozen=True)
class Interval:
    """One contiguous span of tracked time for a mission."""

    mission: str
    start: datetime
    end: Optional[datetime] = None                  # None while still running

    @property
    def is_open(self) -> bool:
        return self.end is None

    def closed_at(self, end: datetime) -> 'Interval':
        """Return a copy of this interval ending at ``end``."""
        return replace(self, end=end)

    def elapsed(self, now: datetime) -> timedelta:
        """Tracked time of this interval, using ``now`` for an open end."""
        return elapsed_between(self.start, self.end if self.end is not None else now)


@dataclass(frozen=True)
class SessionState:
    """Derived tracker state: idle, or running a mission since ``start``."""

    phase: SessionPhase
    mission: Optional[str] = None
    start: Optional[datetime] = None

    @classmethod
    def idle(cls) -> 'SessionState':
        return cls(phase=SessionPhase.IDLE)

    @classmethod
    def running(cls, mission: str, start: datetime) -> 'SessionState':
        return cls(phase=SessionPhase.RUNNING, mission=mission, start=start)

    @property
    def is_running(self) -> bool:
        return self.phase == SessionPhase.RUNNING

    def describe(self) -> str:
        """Short human-readable form used in error reports."""
        if self.is_running:
            return f"running '{self.mission}' since {self.start.isoformat()}"
        return "idle"


@dataclass(frozen=True)
class TransitionResult:
    """Represents a state machine transition result."""

    intervals: tuple[Interval, ...]
    from_state: SessionState
    to_state: SessionState
    trigger: Trigger
    timestamp: datetime

    @property
    def mission(self) -> Optional[str]:
        return self.to_state.mission or self.from_state.mission


@dataclass(frozen=True)
class MissionStatus:
    """Result of a status read."""

    state: SessionState
    elapsed: timedelta = timedelta(0)


@dataclass(frozen=True)
class MissionTotal:
    """Accumulated time of one mission across all of its intervals."""

    mission: str
    total: timedelta
    interval_count: int
    running: bool = False
