"""
Track duration probing.

Durations are read with mutagen: local files directly, remote files from
a byte-range prefix. Probes run in small batches with a hard per-probe
timeout; a probe that fails or times out reports 0 and never holds up
its batch. Results are merged into the DurationCache and persisted after
every batch.
"""

import asyncio
import io
from typing import Callable, Iterable, Optional

import httpx
from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

from droplist.core.config import CacheConfig
from droplist.domain.library.models import Track

from .batching import run_in_batches
from .duration_cache import DurationCache


def read_local_duration(path: str) -> float:
    """Duration of a local audio file in seconds, 0 if unreadable."""
    with open(path, "rb") as f:
        audio = MutagenFile(f)
    if audio is None or audio.info is None:
        return 0.0
    return float(audio.info.length or 0.0)


def parse_total_size(response: httpx.Response) -> Optional[int]:
    """Full resource size from Content-Range (206) or Content-Length (200)."""
    content_range = response.headers.get("content-range", "")
    if "/" in content_range:
        total = content_range.rsplit("/", 1)[1].strip()
        return int(total) if total.isdigit() else None
    if response.status_code == 200:
        length = response.headers.get("content-length", "")
        return int(length) if length.isdigit() else None
    return None


def estimate_duration(data: bytes, total_size: Optional[int]) -> float:
    """
    Duration from the first bytes of an audio file.

    Containers that store the length in their header (FLAC, WAV, MP4,
    Xing-tagged MP3) report it directly. When the reported length only
    covers the bytes read, it is scaled to the full size by bitrate.
    """
    audio = MutagenFile(io.BytesIO(data))
    if audio is None or audio.info is None:
        return 0.0

    length = float(audio.info.length or 0.0)
    bitrate = getattr(audio.info, "bitrate", 0) or 0
    if not bitrate or not total_size or total_size <= len(data):
        return length

    prefix_length = len(data) * 8 / bitrate
    if length <= prefix_length * 1.05:
        return total_size * 8 / bitrate
    return length


class DurationProber:
    """Batched duration probing backed by a DurationCache.

    A key that is already cached or currently being probed is skipped.
    """

    def __init__(
        self,
        cache: DurationCache,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[CacheConfig] = None,
        fetch_url: Optional[Callable[[str], str]] = None,
    ):
        self.cache = cache
        self.client = client
        self.config = config or CacheConfig()
        self._fetch_url = fetch_url or (lambda url: url)
        self._in_flight: set[str] = set()

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    def pending(self, tracks: Iterable[Track]) -> list[Track]:
        """Tracks that still need probing, one per content key."""
        selected = []
        keys: set[str] = set()
        for track in tracks:
            key = track.content_key
            if key in self.cache or key in self._in_flight or key in keys:
                continue
            keys.add(key)
            selected.append(track)
        return selected

    async def probe_tracks(
        self,
        tracks: Iterable[Track],
        is_relevant: Optional[Callable[[str], bool]] = None,
    ) -> dict[str, float]:
        """
        Probe durations for tracks not yet cached.

        Args:
            tracks: Tracks to probe
            is_relevant: Checked at merge time; results for keys it rejects
                (e.g. from a replaced playlist) are dropped

        Returns:
            Durations merged into the cache by this call
        """
        todo = self.pending(tracks)
        if not todo:
            return {}

        keys = {track.content_key for track in todo}
        self._in_flight.update(keys)
        merged: dict[str, float] = {}

        async def on_batch(pairs: list[tuple[Track, float]]) -> None:
            results = {}
            for track, duration in pairs:
                key = track.content_key
                if is_relevant is not None and not is_relevant(key):
                    logger.debug(f"Dropping stale duration for {track.name}")
                    continue
                results[key] = duration
            changed = self.cache.merge(results)
            merged.update(changed)
            await self.cache.save_async()

        logger.info(f"Probing durations for {len(todo)} tracks")
        try:
            await run_in_batches(
                todo,
                self.probe,
                batch_size=self.config.probe_batch_size,
                delay=self.config.probe_batch_delay,
                on_batch=on_batch,
            )
        finally:
            self._in_flight.difference_update(keys)

        return merged

    async def probe(self, track: Track) -> float:
        """Duration of one track; 0 on timeout or any read failure."""
        try:
            return await asyncio.wait_for(self._probe(track), timeout=self.config.probe_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Duration probe timed out for {track.name}")
        except (httpx.HTTPError, MutagenError, OSError, ValueError) as e:
            logger.warning(f"Duration probe failed for {track.name}: {e}")
        return 0.0

    async def _probe(self, track: Track) -> float:
        if track.is_local:
            return await asyncio.to_thread(read_local_duration, track.local_file.path)
        return await self._probe_remote(track.source_url)

    async def _probe_remote(self, url: str) -> float:
        if self.client is None:
            raise ValueError("No HTTP client configured for remote probing")

        limit = self.config.probe_prefix_bytes
        headers = {"Range": f"bytes=0-{limit - 1}"}
        chunks = []
        received = 0
        # Closing the stream releases the connection even on timeout
        async with self.client.stream("GET", self._fetch_url(url), headers=headers) as response:
            response.raise_for_status()
            total_size = parse_total_size(response)
            async for chunk in response.aiter_bytes():
                chunks.append(chunk)
                received += len(chunk)
                if received >= limit:
                    break

        data = b"".join(chunks)[:limit]
        return await asyncio.to_thread(estimate_duration, data, total_size)
