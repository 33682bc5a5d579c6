"""
Mission state machine module.

Derives the session state (idle or running) from the interval log and
applies start, stop and resume transitions as pure functions that return
a new interval sequence. Storage is never touched here.
"""
