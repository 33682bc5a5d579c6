"""
System failure error classifications.

These exceptions represent an environment the tracker cannot work in:
an unreachable storage medium or an unusable configuration. They are
reported with their underlying cause and never retried.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for environment failures that need user intervention."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class StoreUnavailableError(SystemFailureError):
    """The interval store could not be read or written."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, cause: Optional[BaseException] = None,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target
        self.cause = cause


class ConfigurationError(SystemFailureError):
    """Configuration file is unreadable or holds invalid values."""

    def __init__(self, message: str, config_path: Optional[str] = None,
                 errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.config_path = config_path
        self.errors = errors or []
