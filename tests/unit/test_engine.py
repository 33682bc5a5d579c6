"""Unit tests for the mission tracker coordinator."""

import pytest
from datetime import timedelta
from pathlib import Path
from unittest.mock import Mock

from tempo_app.engine import MissionTracker
from tempo_app.errors import AlreadyRunningError, NothingRunningError
from tempo_app.persistence.interval_store import IntervalStore
from tempo_app.state.models import Interval, SessionState, Trigger


class TestMissionTracker:
    """Test suite for the MissionTracker class."""

    def test_from_config(self, tmp_path: Path) -> None:
        config = {"store": {"db_path": str(tmp_path / "t.db"), "create_dirs": False, "timeout_seconds": 2.5}}
        tracker = MissionTracker.from_config(config)

        assert isinstance(tracker.store, IntervalStore)
        assert tracker.store.db_path == tmp_path / "t.db"
        assert tracker.store.create_dirs is False
        assert tracker.store.timeout == 2.5

    def test_uses_clock_when_now_omitted(self, tracker, clock, store) -> None:
        result = tracker.start("review")
        assert result.timestamp == clock.now
        assert store.load() == [Interval("review", clock.now)]

    def test_start_status_stop_cycle(self, tracker, clock, ts) -> None:
        tracker.start("review")
        clock.advance(90)

        status = tracker.status()
        assert status.state == SessionState.running("review", ts(0))
        assert status.elapsed == timedelta(seconds=90)

        result = tracker.stop()
        assert result.trigger == Trigger.STOP
        assert tracker.status().state == SessionState.idle()

    def test_start_stop_resume_listing(self, tracker, ts) -> None:
        t0, t1, t2, now = ts(0), ts(300), ts(600), ts(660)

        tracker.start("a", now=t0)
        tracker.stop(now=t1)
        resumed = tracker.resume(now=t2)

        assert resumed.to_state == SessionState.running("a", t2)
        assert tracker.status(now=t2).elapsed == timedelta(0)

        [total] = tracker.list_missions(now=now)
        assert total.total == (t1 - t0) + (now - t2)
        assert total.interval_count == 2
        assert total.running is True

    def test_resume_picks_latest_stopped(self, tracker, store, ts) -> None:
        store.save([
            Interval("a", ts(0), ts(10)),
            Interval("b", ts(15), ts(20)),
        ])
        assert tracker.resume(now=ts(30)).mission == "b"

    def test_history_in_append_order(self, tracker, ts) -> None:
        tracker.start("a", now=ts(0))
        tracker.stop(now=ts(5))
        tracker.start("b", now=ts(6))

        assert tracker.history() == [
            Interval("a", ts(0), ts(5)),
            Interval("b", ts(6)),
        ]

    def test_reads_do_not_save(self, ts) -> None:
        store = Mock()
        store.load.return_value = [Interval("a", ts(0))]
        tracker = MissionTracker(store)

        tracker.status(now=ts(1))
        tracker.list_missions(now=ts(1))
        tracker.history()

        store.save.assert_not_called()

    def test_transition_saves_whole_sequence(self, ts) -> None:
        store = Mock()
        history = [Interval("a", ts(0), ts(5))]
        store.load.return_value = history
        tracker = MissionTracker(store)

        tracker.start("b", now=ts(10))

        store.save.assert_called_once_with((history[0], Interval("b", ts(10))))

    def test_rejected_transition_does_not_save(self, ts) -> None:
        store = Mock()
        store.load.return_value = [Interval("a", ts(0))]
        tracker = MissionTracker(store)

        with pytest.raises(AlreadyRunningError):
            tracker.start("b", now=ts(10))
        with pytest.raises(AlreadyRunningError):
            tracker.resume(now=ts(10))

        store.load.return_value = []
        with pytest.raises(NothingRunningError):
            tracker.stop(now=ts(10))

        store.save.assert_not_called()
