"""
Interval persistence module.

Durable, ordered storage for mission intervals with full read,
single-record append and atomic replace-all.
"""

from .interval_store import IntervalStore

__all__ = ["IntervalStore"]
