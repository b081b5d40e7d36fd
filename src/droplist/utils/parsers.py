"""
Track name and duration parsing utilities.

Cross-cutting utilities shared by the artist-image matcher and every
display surface. Both must see the same title/artist for a given name.
"""

import math
import re
from typing import Callable, Iterable, NamedTuple, TypeVar

# Artist shown when a filename carries no recognizable artist
DEFAULT_ARTIST = "Local File"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")
_PAREN_RE = re.compile(r"^(.+?)\s*\(([^)]+)\)")
_DASH_RE = re.compile(r"^(.+?)\s*-\s*(.+)$")
_BY_RE = re.compile(r"^(.+?)\s+by\s+(.+)$", re.IGNORECASE)

T = TypeVar("T")


class ParsedTrackName(NamedTuple):
    """Title and artist extracted from a filename."""

    title: str
    artist: str


def strip_extension(name: str) -> str:
    """Remove the trailing extension from a filename.

    Example:
        "Clair de Lune.flac" -> "Clair de Lune"
    """
    return _EXTENSION_RE.sub("", name)


def parse_track_name(name: str) -> ParsedTrackName:
    """
    Parse a track filename into title and artist.

    Patterns are tried in order, first match wins:
    1. "Title (Artist)"
    2. "Title - Artist"
    3. "Title by Artist" (case-insensitive)

    Args:
        name: Track filename, with or without extension

    Returns:
        ParsedTrackName; artist is DEFAULT_ARTIST when no pattern matches

    Example:
        "Moonlight (Debussy).mp3" -> ParsedTrackName("Moonlight", "Debussy")
    """
    stem = strip_extension(name)

    for pattern in (_PAREN_RE, _DASH_RE, _BY_RE):
        match = pattern.match(stem)
        if match:
            return ParsedTrackName(match.group(1).strip(), match.group(2).strip())

    return ParsedTrackName(stem, DEFAULT_ARTIST)


def format_duration(seconds: float) -> str:
    """
    Format seconds as M:SS, or H:MM:SS from one hour up.

    Unknown or invalid durations render as "0:00".
    """
    if not seconds or not math.isfinite(seconds) or seconds < 0:
        return "0:00"

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_time_string(time_string: str) -> int:
    """
    Parse "M:SS" or "H:MM:SS" into seconds.

    Returns:
        Number of seconds, or 0 if the string is not a recognized format
    """
    try:
        parts = [int(part) for part in time_string.strip().split(":")]
    except ValueError:
        return 0

    if len(parts) == 2:
        minutes, seconds = parts
        return minutes * 60 + seconds
    if len(parts) == 3:
        hours, minutes, seconds = parts
        return hours * 3600 + minutes * 60 + seconds
    return 0


def total_duration(items: Iterable[T], get_duration: Callable[[T], float]) -> float:
    """Sum durations over items, treating missing values as 0."""
    return sum((get_duration(item) or 0) for item in items)


__all__ = [
    "DEFAULT_ARTIST",
    "ParsedTrackName",
    "strip_extension",
    "parse_track_name",
    "format_duration",
    "parse_time_string",
    "total_duration",
]
