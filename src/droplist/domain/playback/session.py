"""
Playback session: the owner of playlist state and background work.

A session loads a track list (shared folder, file references or local
files), hands it to the queue engine, and starts duration probing and
artist-image caching in the background. Navigation works immediately;
durations and images fill in as background batches complete.
"""

import asyncio
import random
from functools import partial
from pathlib import Path
from typing import Iterable, Optional

import httpx
from loguru import logger

from droplist.core.config import Config, get_data_dir, get_duration_cache_path
from droplist.domain.library.folder_refs import extract_file_id, extract_folder_id
from droplist.domain.library.formats import is_supported_format
from droplist.domain.library.listing import ListingParser
from droplist.domain.library.models import LocalFile, Track
from droplist.domain.library.providers.drive import api as drive_api
from droplist.domain.library.providers.drive.exceptions import FolderFetchError
from droplist.domain.library.providers.drive.resolver import (
    DEFAULT_FOLDER_NAME,
    NO_FILES_MESSAGE,
    ErrorKind,
    FolderResolution,
    ResolutionError,
    resolve_folder,
)
from droplist.domain.library.providers.drive.stream import build_stream_url, resolve_fetch_url
from droplist.utils.parsers import total_duration

from .batching import run_in_batches
from .duration_cache import DurationCache
from .image_cache import ImageCache
from .probing import DurationProber
from .queue import QueueEngine
from .source_cache import PlayableSourceCache

LOCAL_FOLDER_NAME = "Local Files"


class PlaybackSession:
    """One playback context: queue, caches and background tasks.

    Use as an async context manager; leaving it cancels background work,
    releases playable sources and closes the HTTP client it created.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
        durations: Optional[DurationCache] = None,
        sources: Optional[PlayableSourceCache] = None,
        parser: Optional[ListingParser] = None,
        image_dir: Optional[Path] = None,
    ):
        self.config = config or Config()
        self._owns_client = client is None
        self.client = client or drive_api.create_client(self.config.drive)
        self.parser = parser

        self.engine = QueueEngine(self.config.queue, rng)
        if durations is None:
            durations = DurationCache.load(get_duration_cache_path(self.config))
        self.durations = durations
        self.sources = sources if sources is not None else PlayableSourceCache()

        fetch_url = partial(resolve_fetch_url, proxy_path=self.config.drive.proxy_path)
        self.prober = DurationProber(self.durations, self.client, self.config.cache, fetch_url)
        self.images = ImageCache(
            image_dir or get_data_dir() / "images",
            self.client,
            max_size=self.config.cache.image_max_size,
            fetch_url=fetch_url,
        )

        self.folder_name = ""
        self._tasks: set[asyncio.Task] = set()

    # State access

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self.engine.playlist.tracks

    def current_keys(self) -> set[str]:
        return {track.content_key for track in self.tracks}

    def is_current_key(self, key: str) -> bool:
        """Whether a content key belongs to the loaded playlist right now."""
        return key in self.current_keys()

    def duration_for(self, track: Track) -> float:
        """Known duration in seconds, 0 while unknown."""
        return self.durations.get(track.content_key)

    def total_duration(self) -> float:
        return total_duration(self.tracks, self.duration_for)

    def image_for(self, track: Track) -> Optional[str]:
        """Display URL of the track's artist image (cached copy when ready)."""
        if not track.artist_image_url:
            return None
        return self.images.lookup(track.artist_image_url) or track.artist_image_url

    def playable_uri(self, track: Track) -> str:
        """URI a player should open for this track."""
        if track.source_url:
            return track.source_url
        return self.sources.acquire(track.local_file).uri

    # Loading

    def replace_tracks(self, tracks: Iterable[Track], folder_name: str) -> None:
        """Install a new track list and start background work for it."""
        tracks = list(tracks)
        self.engine.replace_tracks(tracks)
        self.folder_name = folder_name
        logger.info(f"Loaded {len(tracks)} tracks from {folder_name!r}")
        if tracks:
            self._start_background(tracks)

    async def load_folder(self, reference: str) -> FolderResolution:
        """Resolve a shared folder and load its tracks.

        The current playlist is kept when resolution fails.
        """
        resolution = await resolve_folder(
            reference, self.config.drive, client=self.client, parser=self.parser
        )
        if resolution.ok:
            self.replace_tracks(resolution.tracks, resolution.folder_name)
        return resolution

    async def _track_for_file(self, file_id: str) -> Track:
        name = file_id
        try:
            metadata = await drive_api.fetch_file_metadata(
                self.client, file_id, self.config.drive.proxy_path
            )
            name = metadata.name or file_id
        except FolderFetchError as e:
            logger.warning(f"No metadata for file {file_id}: {e}")

        drive = self.config.drive
        return Track.from_remote(
            name=name,
            stream_url=build_stream_url(file_id, drive.api_key, drive.proxy_path),
            remote_file_id=file_id,
        )

    async def load_references(self, lines: Iterable[str]) -> FolderResolution:
        """
        Load a playlist from several references, one per line.

        Each line may be a folder (all its tracks are added) or a single
        file. Unrecognized lines are skipped. The first hard error is
        reported only when nothing could be loaded.
        """
        tracks: list[Track] = []
        folder_names: list[str] = []
        loose_files = 0
        first_error: Optional[ResolutionError] = None

        for line in lines:
            reference = line.strip()
            if not reference or reference.startswith("#"):
                continue

            file_id = extract_file_id(reference)
            if extract_folder_id(reference):
                resolution = await resolve_folder(
                    reference, self.config.drive, client=self.client, parser=self.parser
                )
                if resolution.ok:
                    tracks.extend(resolution.tracks)
                    folder_names.append(resolution.folder_name)
                    continue
                if not file_id:
                    logger.warning(f"Skipping {reference}: {resolution.error.message}")
                    first_error = first_error or resolution.error
                    continue
                # A bare id that is not a folder may still be a single file
                logger.debug(f"{reference} is not a folder, trying it as a file")

            if file_id:
                tracks.append(await self._track_for_file(file_id))
                loose_files += 1
                continue

            logger.warning(f"Skipping unrecognized reference: {reference}")
            first_error = first_error or ResolutionError(
                ErrorKind.INVALID_REFERENCE, f"Not a valid link or id: {reference!r}"
            )

        if not tracks:
            error = first_error or ResolutionError(ErrorKind.NO_FILES_FOUND, NO_FILES_MESSAGE)
            return FolderResolution([], DEFAULT_FOLDER_NAME, error)

        single_folder = len(folder_names) == 1 and not loose_files
        folder_name = folder_names[0] if single_folder else DEFAULT_FOLDER_NAME
        self.replace_tracks(tracks, folder_name)
        return FolderResolution(tracks, folder_name)

    async def load_local_files(self, paths: Iterable[str | Path]) -> list[Track]:
        """Load local audio files (other files are ignored) as the playlist."""
        local_files = []
        for path in map(Path, paths):
            if not is_supported_format(path):
                logger.debug(f"Skipping non-audio file: {path}")
                continue
            try:
                local_files.append(LocalFile.from_path(path))
            except OSError as e:
                logger.warning(f"Cannot read {path}: {e}")

        tracks = [Track.from_local(local_file) for local_file in local_files]
        if not tracks:
            return []

        parents = {Path(local_file.path).parent for local_file in local_files}
        folder_name = parents.pop().name if len(parents) == 1 else LOCAL_FOLDER_NAME
        self.replace_tracks(tracks, folder_name or LOCAL_FOLDER_NAME)
        return tracks

    # Background work

    def _start_background(self, tracks: list[Track]) -> None:
        self._spawn(self.prober.probe_tracks(tracks, is_relevant=self.is_current_key))
        image_urls = list(dict.fromkeys(t.artist_image_url for t in tracks if t.artist_image_url))
        if image_urls:
            self._spawn(self._cache_images(image_urls))

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Background task failed")

    async def _cache_images(self, urls: list[str]) -> None:
        cache = self.config.cache
        await run_in_batches(
            urls, self.images.get, batch_size=cache.probe_batch_size, delay=cache.probe_batch_delay
        )

    async def wait_for_background(self) -> None:
        """Wait until all background probing and image caching finishes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self.sources.close()
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "PlaybackSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
