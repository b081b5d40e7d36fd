"""
Persistent track duration cache.

Durations are keyed by content identity (see Track.content_key), so they
survive playlist reloads of the same content. Stored as a flat JSON
object of key -> seconds.
"""

import asyncio
import json
import math
from pathlib import Path
from typing import Iterator, Mapping, Optional

from loguru import logger


def _is_valid_duration(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


class DurationCache:
    """Mapping of content key -> duration in seconds.

    Only positive durations are recorded. Merges are monotonic: a later 0
    (timeout, unreadable file) never replaces a known duration.
    """

    def __init__(self, path: Optional[Path] = None, entries: Optional[Mapping[str, float]] = None):
        self.path = path
        self._entries: dict[str, float] = {}
        self._save_lock = asyncio.Lock()
        if entries:
            self.merge(entries)

    @classmethod
    def load(cls, path: Path) -> "DurationCache":
        """Load the cache from disk. A missing or corrupt file yields an empty cache."""
        cache = cls(path)
        if not path.exists():
            return cache

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable duration cache {path}: {e}")
            return cache

        if not isinstance(data, dict):
            logger.warning(f"Ignoring duration cache {path}: expected a JSON object")
            return cache

        cache.merge({str(k): v for k, v in data.items()})
        logger.debug(f"Loaded {len(cache)} cached durations from {path}")
        return cache

    def save(self) -> bool:
        """Write the cache to disk. Returns False (and logs) on failure."""
        return self._write(self.as_dict())

    async def save_async(self) -> bool:
        """Like save(), with the file I/O in a worker thread.

        The entries are copied on the calling loop, so merges made while the
        write runs are kept for the next save.
        """
        async with self._save_lock:
            return await asyncio.to_thread(self._write, self.as_dict())

    def _write(self, entries: dict[str, float]) -> bool:
        if self.path is None:
            return False

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, sort_keys=True)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Could not save duration cache to {self.path}: {e}")
            return False
        return True

    def get(self, key: str, default: float = 0.0) -> float:
        return self._entries.get(key, default)

    def merge(self, results: Mapping[str, float]) -> dict[str, float]:
        """
        Merge probe results into the cache.

        Args:
            results: content key -> probed duration (0 when unknown)

        Returns:
            The entries that were added or changed
        """
        changed = {}
        for key, value in results.items():
            if not _is_valid_duration(value):
                continue
            value = float(value)
            if self._entries.get(key) != value:
                self._entries[key] = value
                changed[key] = value
        return changed

    def as_dict(self) -> dict[str, float]:
        return dict(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
