"""
Usage conflict errors for mission transitions.

Raised when the user asks for a transition the current session state
does not allow. The state the tracker was in is attached so that it can
be reported back verbatim.
"""

from datetime import datetime
from typing import Optional, Dict, Any


class UsageConflictError(Exception):
    """Base class for transitions that are invalid in the current state."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.current_state = current_state
        self.context = context or {}
        self.recoverable = True


class AlreadyRunningError(UsageConflictError):
    """A mission is already running; start and resume need an idle tracker."""

    def __init__(self, mission: str, started_at: Optional[datetime] = None,
                 attempted: Optional[str] = None, **kwargs):
        message = f"Mission '{mission}' is already running"
        if started_at is not None:
            message += f" (since {started_at.isoformat()})"
        super().__init__(message, current_state="running", **kwargs)
        self.mission = mission
        self.started_at = started_at
        self.attempted = attempted


class NothingRunningError(UsageConflictError):
    """Stop was requested while the tracker is idle."""

    def __init__(self, message: str = "No mission is running", **kwargs):
        super().__init__(message, current_state="idle", **kwargs)


class NoPriorMissionError(UsageConflictError):
    """Resume was requested but no mission has ever been stopped."""

    def __init__(self, message: str = "No stopped mission to resume", **kwargs):
        super().__init__(message, current_state="idle", **kwargs)
