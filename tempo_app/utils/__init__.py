"""
Utility functions module.

Time Semantics:
- All timestamps are timezone-aware and normalised to UTC
- Elapsed times are exact ``timedelta`` differences at microsecond resolution
- Stored timestamps are RFC 3339 text
"""
