"""
Artist image cache.

Remote artist images are downloaded once, decoded, shrunk and re-encoded
as PNG under the data directory. Any failure falls back to the original
URL so a bad image never costs a track its place in the playlist.
"""

import asyncio
import hashlib
import io
from pathlib import Path
from typing import Callable, Optional

import httpx
from loguru import logger
from PIL import Image, UnidentifiedImageError


def cache_filename(url: str) -> str:
    """Stable filename for a cached copy of `url`."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest() + ".png"


def reencode_image(data: bytes, output_path: Path, max_size: int) -> None:
    """
    Decode image bytes, shrink to fit `max_size`, and save as PNG.

    Raises:
        UnidentifiedImageError: If the bytes are not a decodable image
        OSError: If the file cannot be written
    """
    img = Image.open(io.BytesIO(data))
    img.load()

    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")

    img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    tmp_path = output_path.with_suffix(".tmp")
    img.save(tmp_path, format="PNG", optimize=True)
    tmp_path.replace(output_path)


class ImageCache:
    """Maps remote image URLs to locally cached files."""

    def __init__(
        self,
        directory: Path,
        client: httpx.AsyncClient,
        max_size: int = 512,
        fetch_url: Optional[Callable[[str], str]] = None,
    ):
        self.directory = directory
        self.client = client
        self.max_size = max_size
        self._fetch_url = fetch_url or (lambda url: url)
        self._resolved: dict[str, str] = {}
        self._in_flight: dict[str, asyncio.Task] = {}

    def lookup(self, url: str) -> Optional[str]:
        """Already-resolved display URL for `url`, if any."""
        return self._resolved.get(url)

    async def get(self, url: str) -> str:
        """
        Display URL for an image: a local file URI, or `url` itself on failure.

        Concurrent requests for the same URL share one download.
        """
        if url in self._resolved:
            return self._resolved[url]

        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._cache(url))
            self._in_flight[url] = task
        try:
            result = await task
        finally:
            self._in_flight.pop(url, None)

        self._resolved[url] = result
        return result

    async def _cache(self, url: str) -> str:
        path = self.directory / cache_filename(url)
        if path.exists():
            logger.debug(f"Image cache hit: {url}")
            return path.as_uri()

        try:
            response = await self.client.get(self._fetch_url(url))
            response.raise_for_status()
            self.directory.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(reencode_image, response.content, path, self.max_size)
        except (httpx.HTTPError, UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning(f"Could not cache image {url}, using original URL: {e}")
            return url

        return path.as_uri()
