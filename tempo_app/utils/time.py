"""
Time handling for mission intervals.

Centralizes the clock, timestamp validation, RFC 3339 encoding and
duration rendering so that every component agrees on resolution and
timezone.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..errors import InvalidTimestampError

# RFC 3339 allows arbitrary fractional digits; datetime stops at microseconds.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(ts: datetime, what: str = "timestamp") -> datetime:
    """
    Validate a supplied timestamp and normalise it to UTC.

    Args:
        ts: Timestamp to validate
        what: Label used in the error message

    Returns:
        The same instant expressed in UTC

    Raises:
        InvalidTimestampError: If ``ts`` is not a timezone-aware datetime
    """
    if not isinstance(ts, datetime):
        raise InvalidTimestampError(f"{what} must be a datetime, got {type(ts).__name__}")
    if ts.tzinfo is None or ts.utcoffset() is None:
        raise InvalidTimestampError(f"{what} must be timezone-aware", timestamp=ts)
    return ts.astimezone(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """Encode a timestamp as RFC 3339 text for storage."""
    return ts.astimezone(timezone.utc).isoformat()


def parse_timestamp(text: str) -> datetime:
    """
    Decode an RFC 3339 timestamp.

    Fractions finer than a microsecond are truncated and a trailing ``Z``
    is accepted.

    Raises:
        ValueError: If the text is not a timezone-aware RFC 3339 timestamp
    """
    if not isinstance(text, str):
        raise ValueError(f"expected text, got {type(text).__name__}")
    normalized = text.strip()
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    normalized = _FRACTION_RE.sub(r"\1", normalized)
    ts = datetime.fromisoformat(normalized)
    if ts.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {text!r}")
    try:
        return ts.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"timestamp out of range in UTC: {text!r}") from e


def elapsed_between(start: datetime, end: Optional[datetime] = None) -> timedelta:
    """
    Exact elapsed time between two timestamps.

    Args:
        start: Start timestamp
        end: End timestamp, defaults to now

    Returns:
        ``end - start``
    """
    if end is None:
        end = utc_now()
    return end - start


def format_duration(elapsed: timedelta, show_seconds: bool = True) -> str:
    """
    Render a duration the way the status line shows it, e.g. ``1d 2h 5m 3s``.

    Negative durations are rendered as zero.
    """
    total = max(int(elapsed.total_seconds()), 0)
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds and show_seconds:
        parts.append(f"{seconds}s")

    if not parts:
        return "0s" if show_seconds else "0m"
    return " ".join(parts)
