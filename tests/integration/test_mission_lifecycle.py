"""End-to-end tests running command sequences against a real interval log."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from tempo_app.engine import MissionTracker
from tempo_app.errors import UsageConflictError
from tempo_app.persistence.interval_store import IntervalStore
from tempo_app.state.machine import derive_session_state, validate_intervals
from tempo_app.state.models import SessionPhase

START = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.mark.integration
class TestMissionLifecycle:
    """Run realistic command sequences through tracker and store."""

    def test_day_of_work(self, tmp_path):
        tracker = MissionTracker(IntervalStore(tmp_path / "tempo.db"))
        t = lambda minutes: START + timedelta(minutes=minutes)

        tracker.start("emails", now=t(0))
        tracker.stop(now=t(30))
        tracker.start("design review", now=t(45))
        tracker.stop(now=t(105))
        tracker.resume(now=t(120))
        tracker.stop(now=t(150))
        tracker.start("emails", now=t(160))

        totals = {total.mission: total for total in tracker.list_missions(now=t(170))}
        assert totals["emails"].total == timedelta(minutes=40)
        assert totals["emails"].running is True
        assert totals["design review"].total == timedelta(minutes=90)
        assert totals["design review"].interval_count == 2

        status = tracker.status(now=t(170))
        assert status.state.mission == "emails"
        assert status.elapsed == timedelta(minutes=10)

    def test_state_survives_new_tracker(self, tmp_path):
        db_path = tmp_path / "tempo.db"
        MissionTracker(IntervalStore(db_path)).start("a", now=START)

        reopened = MissionTracker(IntervalStore(db_path))
        assert reopened.status(now=START + timedelta(seconds=7)).elapsed == timedelta(seconds=7)

    @pytest.mark.parametrize("seed", [1, 7, 42, 2024])
    def test_random_sequences_keep_log_consistent(self, tmp_path, seed):
        rng = random.Random(seed)
        store = IntervalStore(tmp_path / "tempo.db")
        tracker = MissionTracker(store)
        names = ["alpha", "beta", "gamma"]
        now = START

        for _ in range(60):
            now += timedelta(seconds=rng.choice([0, 1, 5, 60, 3600]))
            before = store.load()
            command = rng.choice(["start", "stop", "resume"])

            try:
                if command == "start":
                    tracker.start(rng.choice(names), now=now)
                elif command == "stop":
                    tracker.stop(now=now)
                else:
                    tracker.resume(now=now)
            except UsageConflictError:
                assert store.load() == before
                continue

            after = store.load()
            validate_intervals(after)
            assert after[:len(before) - 1] == before[:len(before) - 1]
            assert sum(1 for interval in after if interval.is_open) <= 1

            state = derive_session_state(after)
            if command == "stop":
                assert state.phase == SessionPhase.IDLE
                assert len(after) == len(before)
            else:
                assert state.phase == SessionPhase.RUNNING
                assert len(after) == len(before) + 1

        intervals = store.load()
        grand_total = sum((total.total for total in tracker.list_missions(now=now)), timedelta(0))
        expected = sum(
            ((interval.end or now) - interval.start for interval in intervals),
            timedelta(0),
        )
        assert grand_total == expected
