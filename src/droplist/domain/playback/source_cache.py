"""
Playable-source cache for local files.

Each distinct local file (name, size, mtime) is materialized once per
session and reused for every later reference. Handles are released
exactly once: when superseded or when the cache is closed.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from droplist.domain.library.models import LocalFile

SourceKey = tuple[str, int, float]


class SourceHandle:
    """A materialized playable source. close() releases it once."""

    def __init__(self, key: SourceKey, uri: str, release: Optional[Callable[[], None]] = None):
        self.key = key
        self.uri = uri
        self._release = release
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> bool:
        """Release the handle. Returns False if it was already released."""
        if self._closed:
            return False
        self._closed = True
        if self._release is not None:
            try:
                self._release()
            except OSError as e:
                logger.warning(f"Could not release playable source {self.uri}: {e}")
        return True

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"SourceHandle({self.uri!r}, {state})"


Materializer = Callable[[LocalFile], SourceHandle]


def link_into(directory: Path) -> Materializer:
    """
    Materializer that exposes local files inside a session directory.

    Files are symlinked where the platform allows it and copied otherwise.
    Releasing a handle removes its link or copy, never the original file.
    """

    def materialize(local_file: LocalFile) -> SourceHandle:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix="src-", suffix=f"-{local_file.name}", dir=directory)
        os.close(fd)
        target = Path(tmp_name)
        target.unlink()
        try:
            target.symlink_to(Path(local_file.path).resolve())
        except OSError:
            shutil.copy2(local_file.path, target)
        return SourceHandle(local_file.identity, target.as_uri(), lambda: target.unlink(missing_ok=True))

    return materialize


class PlayableSourceCache:
    """Identity-keyed cache of materialized sources, owned by one session."""

    def __init__(self, materializer: Optional[Materializer] = None):
        self._own_dir: Optional[tempfile.TemporaryDirectory] = None
        if materializer is None:
            self._own_dir = tempfile.TemporaryDirectory(prefix="droplist-")
            materializer = link_into(Path(self._own_dir.name))
        self._materialize = materializer
        self._handles: dict[SourceKey, SourceHandle] = {}

    def acquire(self, local_file: LocalFile) -> SourceHandle:
        """Return the handle for this content, materializing it on first use."""
        key = local_file.identity
        handle = self._handles.get(key)
        if handle is not None and not handle.closed:
            logger.debug(f"Reusing playable source for {local_file.name}")
            return handle

        handle = self._materialize(local_file)
        self._handles[key] = handle
        return handle

    def supersede(self, local_file: LocalFile) -> bool:
        """Release and forget the handle for this content, if any."""
        handle = self._handles.pop(local_file.identity, None)
        if handle is None:
            return False
        handle.close()
        return True

    def close(self) -> int:
        """Release every handle. Returns the number released."""
        released = sum(1 for handle in self._handles.values() if handle.close())
        self._handles.clear()
        if self._own_dir is not None:
            self._own_dir.cleanup()
            self._own_dir = None
        if released:
            logger.debug(f"Released {released} playable sources")
        return released

    def __contains__(self, local_file: object) -> bool:
        return isinstance(local_file, LocalFile) and local_file.identity in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __enter__(self) -> "PlayableSourceCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
