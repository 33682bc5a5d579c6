"""
Error classification for the mission tracker.

Three families cover every failure a command can hit: usage conflicts
(a transition that is invalid in the current state), data integrity
problems (recorded or supplied data breaks an interval invariant) and
system failures (the storage medium or configuration is unusable).
"""

from .usage_conflicts import (
    UsageConflictError,
    AlreadyRunningError,
    NothingRunningError,
    NoPriorMissionError,
)
from .data_integrity import (
    DataIntegrityError,
    InvalidTimestampError,
    InvalidMissionNameError,
    CorruptRecordError,
)
from .system_failures import (
    SystemFailureError,
    StoreUnavailableError,
    ConfigurationError,
)

__all__ = [
    # Usage Conflicts
    "UsageConflictError",
    "AlreadyRunningError",
    "NothingRunningError",
    "NoPriorMissionError",
    # Data Integrity
    "DataIntegrityError",
    "InvalidTimestampError",
    "InvalidMissionNameError",
    "CorruptRecordError",
    # System Failures
    "SystemFailureError",
    "StoreUnavailableError",
    "ConfigurationError",
]
