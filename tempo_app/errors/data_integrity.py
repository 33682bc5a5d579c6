"""
Data integrity error classifications for the interval log.

These exceptions signal that recorded or supplied data violates one of the
interval invariants. They are surfaced immediately and nothing is saved.
"""

from datetime import datetime
from typing import Optional, Dict, Any


class DataIntegrityError(Exception):
    """Base class for invariant violations in recorded or supplied data."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class InvalidTimestampError(DataIntegrityError):
    """A supplied timestamp would produce a negative or overlapping interval."""

    def __init__(self, message: str, timestamp: Optional[datetime] = None,
                 reference: Optional[datetime] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timestamp = timestamp
        self.reference = reference


class InvalidMissionNameError(DataIntegrityError):
    """Mission names must contain at least one non-whitespace character."""

    def __init__(self, message: str, name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.name = name


class CorruptRecordError(DataIntegrityError):
    """Persisted content cannot be read back as well-formed intervals."""

    def __init__(self, message: str, record: Optional[Dict[str, Any]] = None,
                 position: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record = record
        self.position = position
