"""
Folder resolution: turn a shared-folder reference into playable tracks.

Resolution order:
1. Root listing (hard failure if it cannot be fetched)
2. Artist image subfolder (best-effort, bounded by a timeout)
3. Tracks subfolder, only when a name is configured (strict: missing is an error)
4. Audio entries become Tracks; images are attached by artist name
"""

import asyncio
from enum import Enum
from typing import NamedTuple, Optional

import httpx
from loguru import logger

from droplist.core.config import DriveConfig

from ...artist_images import match_artist_images
from ...folder_refs import extract_folder_id
from ...listing import ListingParser, get_default_parser
from ...models import Entry, Track
from .api import create_client, fetch_folder_html
from .exceptions import (
    DriveError,
    FolderFetchError,
    InvalidFolderReferenceError,
    SubfolderFetchError,
    TracksFolderNotFoundError,
)
from .stream import build_stream_url

DEFAULT_FOLDER_NAME = "Shared Folder"
NO_FILES_MESSAGE = "No files found in folder or folder not publicly accessible"


class ErrorKind(Enum):
    """Why a resolution produced no tracks."""

    INVALID_REFERENCE = "invalid_reference"
    FETCH_FAILED = "fetch_failed"
    SUBFOLDER_FETCH_FAILED = "subfolder_fetch_failed"
    TRACKS_FOLDER_NOT_FOUND = "tracks_folder_not_found"
    NO_FILES_FOUND = "no_files_found"


class ResolutionError(NamedTuple):
    kind: ErrorKind
    message: str


class FolderResolution(NamedTuple):
    """Result of resolving a folder. `tracks` is empty whenever `error` is set."""

    tracks: list[Track]
    folder_name: str
    error: Optional[ResolutionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def find_subfolder(entries: list[Entry], name: str) -> Optional[Entry]:
    """First folder entry whose name contains `name` (case-insensitive)."""
    needle = name.strip().lower()
    if not needle:
        return None
    for entry in entries:
        if entry.is_folder and needle in entry.name.lower():
            return entry
    return None


async def _fetch_entries(
    client: httpx.AsyncClient, parser: ListingParser, folder_id: str
) -> list[Entry]:
    html = await fetch_folder_html(client, folder_id)
    return parser.parse(html)


async def fetch_artist_images(
    client: httpx.AsyncClient,
    parser: ListingParser,
    root_entries: list[Entry],
    config: DriveConfig,
) -> list[Entry]:
    """
    Image entries from the artist subfolder.

    Never raises: a missing, failing or slow subfolder only means no images.
    """
    folder = find_subfolder(root_entries, config.artist_folder_name)
    if folder is None:
        logger.debug(f"No artist folder matching {config.artist_folder_name!r}")
        return []

    try:
        entries = await asyncio.wait_for(
            _fetch_entries(client, parser, folder.id), timeout=config.subfolder_timeout
        )
    except asyncio.TimeoutError:
        logger.warning(
            f"Artist folder {folder.name!r} timed out after {config.subfolder_timeout}s; "
            f"continuing without images"
        )
        return []
    except FolderFetchError as e:
        logger.warning(f"Artist folder {folder.name!r} unavailable: {e}")
        return []

    images = [entry for entry in entries if entry.is_image]
    logger.info(f"Found {len(images)} artist images in {folder.name!r}")
    return images


async def fetch_tracks_folder(
    client: httpx.AsyncClient,
    parser: ListingParser,
    root_entries: list[Entry],
    folder_name: str,
) -> list[Entry]:
    """
    Entries of the configured tracks subfolder.

    Raises:
        TracksFolderNotFoundError: No folder entry matches `folder_name`
        SubfolderFetchError: The subfolder listing could not be fetched
    """
    folder = find_subfolder(root_entries, folder_name)
    if folder is None:
        raise TracksFolderNotFoundError(folder_name)

    try:
        return await _fetch_entries(client, parser, folder.id)
    except FolderFetchError as e:
        raise SubfolderFetchError(folder.id, e.status_code, e.detail) from e


def build_tracks(
    files: list[Entry], images: list[Entry], config: DriveConfig
) -> list[Track]:
    """Build Tracks from audio entries in listing order, attaching artist images."""
    audio = [entry for entry in files if entry.is_audio]
    image_matches = match_artist_images(audio, images)

    tracks = []
    for entry in audio:
        image_id = image_matches.get(entry.id)
        image_url = (
            build_stream_url(image_id, config.api_key, config.proxy_path) if image_id else None
        )
        tracks.append(
            Track.from_remote(
                name=entry.name,
                stream_url=build_stream_url(entry.id, config.api_key, config.proxy_path),
                remote_file_id=entry.id,
                artist_image_url=image_url,
            )
        )
    return tracks


async def _resolve(
    client: httpx.AsyncClient, parser: ListingParser, reference: str, config: DriveConfig
) -> FolderResolution:
    folder_id = extract_folder_id(reference)
    if not folder_id:
        raise InvalidFolderReferenceError(reference)

    html = await fetch_folder_html(client, folder_id)
    folder_name = parser.folder_title(html) or DEFAULT_FOLDER_NAME
    root_entries = parser.parse(html)
    logger.info(f"Root listing of {folder_name!r}: {len(root_entries)} entries")

    images = await fetch_artist_images(client, parser, root_entries, config)

    if config.tracks_folder_name.strip():
        files = await fetch_tracks_folder(
            client, parser, root_entries, config.tracks_folder_name
        )
    else:
        files = root_entries

    files = [entry for entry in files if not entry.is_folder]
    # Images living next to the tracks are candidates too
    images = images + [entry for entry in files if entry.is_image]

    tracks = build_tracks(files, images, config)
    if not tracks:
        return FolderResolution(
            [], folder_name, ResolutionError(ErrorKind.NO_FILES_FOUND, NO_FILES_MESSAGE)
        )

    logger.info(f"Resolved {len(tracks)} tracks from {folder_name!r}")
    return FolderResolution(tracks, folder_name)


def _error_kind(error: DriveError) -> ErrorKind:
    if isinstance(error, InvalidFolderReferenceError):
        return ErrorKind.INVALID_REFERENCE
    if isinstance(error, TracksFolderNotFoundError):
        return ErrorKind.TRACKS_FOLDER_NOT_FOUND
    if isinstance(error, SubfolderFetchError):
        return ErrorKind.SUBFOLDER_FETCH_FAILED
    return ErrorKind.FETCH_FAILED


async def resolve_folder(
    reference: str,
    config: Optional[DriveConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
    parser: Optional[ListingParser] = None,
) -> FolderResolution:
    """
    Resolve a folder reference into tracks.

    Hard failures are reported in the result, never raised.

    Args:
        reference: Folder URL or raw folder id
        config: Drive settings (folder names, API key, timeouts)
        client: HTTP client; a temporary one is created when omitted
        parser: Listing parser; the regex parser when omitted

    Returns:
        FolderResolution with tracks, or with an error and no tracks
    """
    config = config or DriveConfig()
    parser = parser or get_default_parser()

    try:
        if client is None:
            async with create_client(config) as owned_client:
                return await _resolve(owned_client, parser, reference, config)
        return await _resolve(client, parser, reference, config)
    except DriveError as e:
        logger.warning(f"Folder resolution failed: {e}")
        return FolderResolution([], DEFAULT_FOLDER_NAME, ResolutionError(_error_kind(e), str(e)))
