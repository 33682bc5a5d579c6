"""
Mission tracker coordinator.

Runs one load → compute → save cycle per command: the interval log is
read from the store, the state machine computes the new sequence or the
requested figures, and only a successful transition is written back.
"""

from datetime import datetime
from typing import Any, Callable, Optional

import structlog

from .persistence.interval_store import IntervalStore
from .state.machine import (
    apply_resume,
    apply_start,
    apply_stop,
    evaluate_status,
    summarize_missions,
    validate_intervals,
)
from .state.models import Interval, MissionStatus, MissionTotal, TransitionResult
from .utils.time import utc_now

logger = structlog.get_logger(__name__)


class MissionTracker:
    """
    Main coordinator for the mission tracker.

    Holds no session state of its own; every call re-reads the log.
    """

    def __init__(self, store: IntervalStore, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.store = store
        self.clock = clock or utc_now
        self.logger = logger

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "MissionTracker":
        """Build a tracker from a merged configuration dictionary."""
        store_cfg = config.get("store", {})
        store = IntervalStore(
            db_path=store_cfg.get("db_path", "tempo.db"),
            create_dirs=store_cfg.get("create_dirs", False),
            timeout=store_cfg.get("timeout_seconds", 30.0),
        )
        return cls(store)

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self.clock()

    def _load(self) -> list[Interval]:
        intervals = self.store.load()
        validate_intervals(intervals)
        return intervals

    def _commit(self, result: TransitionResult) -> TransitionResult:
        self.store.save(result.intervals)
        self.logger.info(
            "Transition saved",
            trigger=result.trigger.value,
            mission=result.mission,
            interval_count=len(result.intervals),
        )
        return result

    def start(self, name: str, now: Optional[datetime] = None) -> TransitionResult:
        """Start ``name``; fails if any mission is already running."""
        return self._commit(apply_start(self._load(), name, self._now(now)))

    def stop(self, now: Optional[datetime] = None) -> TransitionResult:
        """Stop the running mission."""
        return self._commit(apply_stop(self._load(), self._now(now)))

    def resume(self, now: Optional[datetime] = None) -> TransitionResult:
        """Resume the most recently stopped mission."""
        return self._commit(apply_resume(self._load(), self._now(now)))

    def status(self, now: Optional[datetime] = None) -> MissionStatus:
        return evaluate_status(self._load(), self._now(now))

    def list_missions(self, now: Optional[datetime] = None) -> list[MissionTotal]:
        return summarize_missions(self._load(), self._now(now))

    def history(self) -> list[Interval]:
        """Every recorded interval in append order."""
        return self._load()
