"""
Artist image association.

Pairs each audio entry with an image whose filename (extension stripped)
equals the track's parsed artist. Matching is exact after lower-casing;
there is no fuzzy or partial matching.
"""

from typing import Iterable

from loguru import logger

from droplist.utils.parsers import parse_track_name, strip_extension

from .models import Entry


def build_image_index(image_entries: Iterable[Entry]) -> dict[str, str]:
    """Index image ids by lower-cased filename stem (first image wins)."""
    index: dict[str, str] = {}
    for image in image_entries:
        key = strip_extension(image.name).strip().lower()
        if key:
            index.setdefault(key, image.id)
    return index


def match_artist_images(
    audio_entries: Iterable[Entry], image_entries: Iterable[Entry]
) -> dict[str, str]:
    """
    Map audio entry ids to image entry ids by artist name.

    Args:
        audio_entries: Audio entries to match
        image_entries: Candidate artist images

    Returns:
        {audio_id: image_id} for every audio entry with a matching image

    Example:
        "Song (Artist X).mp3" matches "Artist X.png"
    """
    index = build_image_index(image_entries)
    if not index:
        return {}

    matches: dict[str, str] = {}
    for audio in audio_entries:
        artist = parse_track_name(audio.name).artist.lower()
        image_id = index.get(artist)
        if image_id:
            matches[audio.id] = image_id

    logger.debug(f"Matched {len(matches)} tracks to artist images")
    return matches
