"""
Tempo - Personal Mission Time Tracker

A command-line time tracking utility. Missions are started, stopped and
resumed; every span of tracked time is kept as an interval in a local
log from which the current state and per-mission totals are derived.
"""

__version__ = "0.1.0"
__author__ = "Tempo Team"
