"""
Library domain models.

Contains data structures for parsed listing rows and playable tracks.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional

from .formats import MediaType, get_media_type


class EntryKind(Enum):
    """Row kind inferred from listing markup (best-effort)."""

    FILE = "file"
    FOLDER = "folder"


class Entry(NamedTuple):
    """One parsed row from a remote folder listing page.

    Entries are ephemeral: produced and consumed within one resolution pass.
    """

    id: str  # Opaque remote item id
    name: str  # Original filename including extension
    kind: EntryKind = EntryKind.FILE

    @property
    def media_type(self) -> Optional[MediaType]:
        """Audio/image classification by extension; None for folders and other files."""
        if self.kind is EntryKind.FOLDER:
            return None
        return get_media_type(self.name)

    @property
    def is_audio(self) -> bool:
        return self.media_type is MediaType.AUDIO

    @property
    def is_image(self) -> bool:
        return self.media_type is MediaType.IMAGE

    @property
    def is_folder(self) -> bool:
        return self.kind is EntryKind.FOLDER


class LocalFile(NamedTuple):
    """A user-supplied local audio file."""

    path: str
    name: str
    size: int
    mtime: float

    @classmethod
    def from_path(cls, path: str | Path) -> "LocalFile":
        """Build a LocalFile from a filesystem path (stat is taken now)."""
        p = Path(path)
        stat = p.stat()
        return cls(path=str(p), name=p.name, size=stat.st_size, mtime=stat.st_mtime)

    @property
    def identity(self) -> tuple[str, int, float]:
        """Content identity used for playable-source reuse."""
        return (self.name, self.size, self.mtime)


def generate_track_id() -> str:
    """Generate a playlist-local track id (unique per load event)."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Track:
    """A playable unit in the current playlist.

    Exactly one of local_file / remote_stream_url / generic_url is expected.
    When several are present, remote wins over generic over local (display
    fallback only).
    """

    id: str  # Local id, never the remote file id
    name: str
    local_file: Optional[LocalFile] = None
    remote_stream_url: Optional[str] = None
    generic_url: Optional[str] = None
    artist_image_url: Optional[str] = None
    remote_file_id: Optional[str] = None  # Source item id when built from a listing

    def __post_init__(self) -> None:
        if not (self.local_file or self.remote_stream_url or self.generic_url):
            raise ValueError(f"Track {self.name!r} has no audio source")

    @property
    def source_url(self) -> Optional[str]:
        """Authoritative URL source (remote over generic); None for local-only tracks."""
        return self.remote_stream_url or self.generic_url

    @property
    def is_local(self) -> bool:
        return self.source_url is None and self.local_file is not None

    @property
    def content_key(self) -> str:
        """Stable cache key derived from content identity, not from the track id.

        Listing tracks are keyed by remote file id, so the key does not change
        with the stream URL (API key or proxy). Generic tracks are keyed by
        URL and local files by name and size.
        """
        if self.remote_file_id:
            return f"file:{self.remote_file_id}"
        url = self.source_url
        if url:
            return f"url:{url}"
        return f"local:{self.local_file.name}:{self.local_file.size}"

    @classmethod
    def from_remote(
        cls,
        name: str,
        stream_url: str,
        remote_file_id: Optional[str] = None,
        artist_image_url: Optional[str] = None,
    ) -> "Track":
        return cls(
            id=generate_track_id(),
            name=name,
            remote_stream_url=stream_url,
            remote_file_id=remote_file_id,
            artist_image_url=artist_image_url,
        )

    @classmethod
    def from_local(cls, local_file: LocalFile) -> "Track":
        return cls(id=generate_track_id(), name=local_file.name, local_file=local_file)

    @classmethod
    def from_url(cls, name: str, url: str) -> "Track":
        return cls(id=generate_track_id(), name=name, generic_url=url)
