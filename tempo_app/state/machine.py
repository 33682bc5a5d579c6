"""
Core mission state machine logic.

The session state is never stored: it is recomputed from the interval
sequence on every call. Transitions take the current sequence and return
a new one inside a ``TransitionResult``; persisting it is the caller's job.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..errors import (
    AlreadyRunningError,
    CorruptRecordError,
    InvalidMissionNameError,
    InvalidTimestampError,
    NoPriorMissionError,
    NothingRunningError,
)
from ..logging.config import get_state_logger, log_state_transition
from ..utils.time import ensure_aware
from .models import (
    Interval,
    MissionStatus,
    MissionTotal,
    SessionState,
    TransitionResult,
    Trigger,
)

state_logger = get_state_logger(__name__)


def validate_intervals(intervals: Sequence[Interval]) -> None:
    """
    Check a loaded sequence against the interval invariants.

    At most one interval may be open, every closed interval must end at or
    after its start, and intervals ordered by start may not overlap.

    Raises:
        CorruptRecordError: On the first violation found
    """
    open_positions = []
    for position, interval in enumerate(intervals):
        if not interval.mission or not interval.mission.strip():
            raise CorruptRecordError(
                "Interval has a blank mission name",
                position=position,
            )
        if interval.is_open:
            open_positions.append(position)
        elif interval.end < interval.start:
            raise CorruptRecordError(
                f"Interval for '{interval.mission}' ends before it starts",
                position=position,
                context={"start": interval.start.isoformat(), "end": interval.end.isoformat()},
            )

    if len(open_positions) > 1:
        raise CorruptRecordError(
            f"Log holds {len(open_positions)} running intervals, expected at most one",
            position=open_positions[1],
            context={"open_positions": open_positions},
        )

    ordered = sorted(enumerate(intervals), key=lambda item: (item[1].start, item[0]))
    for (prev_pos, prev), (position, current) in zip(ordered, ordered[1:]):
        if prev.is_open or current.start < prev.end:
            raise CorruptRecordError(
                f"Interval for '{current.mission}' overlaps interval for '{prev.mission}'",
                position=position,
                context={"overlaps_position": prev_pos},
            )


def derive_session_state(intervals: Sequence[Interval]) -> SessionState:
    """Return the session state described by ``intervals``."""
    running = [interval for interval in intervals if interval.is_open]
    if not running:
        return SessionState.idle()
    if len(running) > 1:
        raise CorruptRecordError(
            f"Log holds {len(running)} running intervals, expected at most one"
        )
    return SessionState.running(running[0].mission, running[0].start)


def find_resume_candidate(intervals: Sequence[Interval]) -> Optional[Interval]:
    """
    Find the most recently stopped interval.

    Latest ``end`` wins; ties go to the latest ``start`` and then to the
    later position in the sequence.
    """
    closed = [(pos, interval) for pos, interval in enumerate(intervals) if not interval.is_open]
    if not closed:
        return None
    _, latest = max(closed, key=lambda item: (item[1].end, item[1].start, item[0]))
    return latest


def _latest_end(intervals: Sequence[Interval]) -> Optional[datetime]:
    ends = [interval.end for interval in intervals if interval.end is not None]
    return max(ends) if ends else None


def _check_not_before_history(intervals: Sequence[Interval], now: datetime, trigger: Trigger) -> None:
    latest_end = _latest_end(intervals)
    if latest_end is not None and now < latest_end:
        raise InvalidTimestampError(
            f"Cannot {trigger.value} at {now.isoformat()}: "
            f"a recorded interval ends later, at {latest_end.isoformat()}",
            timestamp=now,
            reference=latest_end,
        )


def apply_start(intervals: Sequence[Interval], name: str, now: datetime) -> TransitionResult:
    """
    Start a new mission.

    Requires an idle tracker. Starting while any mission runs is an error,
    including the mission of the same name.

    Raises:
        AlreadyRunningError: A mission is running
        InvalidMissionNameError: ``name`` is blank
        InvalidTimestampError: ``now`` precedes the end of a recorded interval
    """
    now = ensure_aware(now, "start time")
    current = derive_session_state(intervals)
    if current.is_running:
        raise AlreadyRunningError(current.mission, started_at=current.start, attempted=Trigger.START.value)

    if not isinstance(name, str) or not name.strip():
        raise InvalidMissionNameError("Mission name must not be blank", name=name)

    _check_not_before_history(intervals, now, Trigger.START)

    new_state = SessionState.running(name, now)
    result = TransitionResult(
        intervals=tuple(intervals) + (Interval(mission=name, start=now),),
        from_state=current,
        to_state=new_state,
        trigger=Trigger.START,
        timestamp=now,
    )

    log_state_transition(
        state_logger,
        mission=name,
        from_state=current.phase.value,
        to_state=new_state.phase.value,
        trigger=Trigger.START.value,
        context={"timestamp": now.isoformat(), "interval_count": len(result.intervals)}
    )
    return result


def apply_stop(intervals: Sequence[Interval], now: datetime) -> TransitionResult:
    """
    Stop the running mission by closing its open interval at ``now``.

    Raises:
        NothingRunningError: The tracker is idle
        InvalidTimestampError: ``now`` precedes the running interval's start
    """
    now = ensure_aware(now, "stop time")
    current = derive_session_state(intervals)
    if not current.is_running:
        raise NothingRunningError()

    if now < current.start:
        raise InvalidTimestampError(
            f"Cannot stop '{current.mission}' at {now.isoformat()}: "
            f"it started at {current.start.isoformat()}",
            timestamp=now,
            reference=current.start,
        )

    updated = tuple(
        interval.closed_at(now) if interval.is_open else interval
        for interval in intervals
    )
    new_state = SessionState.idle()
    result = TransitionResult(
        intervals=updated,
        from_state=current,
        to_state=new_state,
        trigger=Trigger.STOP,
        timestamp=now,
    )

    log_state_transition(
        state_logger,
        mission=current.mission,
        from_state=current.phase.value,
        to_state=new_state.phase.value,
        trigger=Trigger.STOP.value,
        context={
            "timestamp": now.isoformat(),
            "elapsed_seconds": (now - current.start).total_seconds(),
        }
    )
    return result


def apply_resume(intervals: Sequence[Interval], now: datetime) -> TransitionResult:
    """
    Resume the most recently stopped mission with a fresh open interval.

    The interval being revived is left untouched.

    Raises:
        AlreadyRunningError: A mission is running
        NoPriorMissionError: No interval has ever been stopped
        InvalidTimestampError: ``now`` precedes the end of a recorded interval
    """
    now = ensure_aware(now, "resume time")
    current = derive_session_state(intervals)
    if current.is_running:
        raise AlreadyRunningError(current.mission, started_at=current.start, attempted=Trigger.RESUME.value)

    candidate = find_resume_candidate(intervals)
    if candidate is None:
        raise NoPriorMissionError()

    _check_not_before_history(intervals, now, Trigger.RESUME)

    new_state = SessionState.running(candidate.mission, now)
    result = TransitionResult(
        intervals=tuple(intervals) + (Interval(mission=candidate.mission, start=now),),
        from_state=current,
        to_state=new_state,
        trigger=Trigger.RESUME,
        timestamp=now,
    )

    log_state_transition(
        state_logger,
        mission=candidate.mission,
        from_state=current.phase.value,
        to_state=new_state.phase.value,
        trigger=Trigger.RESUME.value,
        context={
            "timestamp": now.isoformat(),
            "resumed_from_end": candidate.end.isoformat(),
        }
    )
    return result


def _open_elapsed(interval: Interval, now: datetime) -> timedelta:
    """Elapsed time of a running interval; zero if the clock reads before its start."""
    elapsed = interval.elapsed(now)
    if elapsed < timedelta(0):
        state_logger.warning(
            "Clock is behind running interval start, counting zero",
            mission=interval.mission,
            start=interval.start.isoformat(),
            now=now.isoformat(),
        )
        return timedelta(0)
    return elapsed


def evaluate_status(intervals: Sequence[Interval], now: datetime) -> MissionStatus:
    """Report the session state and, when running, the current interval's elapsed time."""
    now = ensure_aware(now, "status time")
    current = derive_session_state(intervals)
    if not current.is_running:
        return MissionStatus(state=current)

    running = next(interval for interval in intervals if interval.is_open)
    return MissionStatus(state=current, elapsed=_open_elapsed(running, now))


def summarize_missions(intervals: Sequence[Interval], now: datetime) -> list[MissionTotal]:
    """
    Total tracked time per mission, in first-seen order.

    A running mission's open interval counts up to ``now``.
    """
    now = ensure_aware(now, "listing time")
    totals: dict[str, timedelta] = {}
    counts: dict[str, int] = {}
    running: Optional[str] = None

    for interval in intervals:
        if interval.is_open:
            elapsed = _open_elapsed(interval, now)
            running = interval.mission
        else:
            elapsed = interval.end - interval.start
        totals[interval.mission] = totals.get(interval.mission, timedelta(0)) + elapsed
        counts[interval.mission] = counts.get(interval.mission, 0) + 1

    return [
        MissionTotal(
            mission=mission,
            total=total,
            interval_count=counts[mission],
            running=(mission == running),
        )
        for mission, total in totals.items()
    ]
