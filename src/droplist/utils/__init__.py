"""
Cross-cutting utilities for droplist.

Contains:
- parsers: Track name and duration parsing
"""

from .parsers import *

__all__ = [
    "DEFAULT_ARTIST",
    "ParsedTrackName",
    "strip_extension",
    "parse_track_name",
    "format_duration",
    "parse_time_string",
    "total_duration",
]
