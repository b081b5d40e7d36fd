"""
Shared-folder provider for droplist.

Scrapes public folder listing pages and maps file ids to playable URLs.
No authentication: only publicly shared folders are supported.
"""

from . import api, resolver, stream
from .exceptions import (
    DriveError,
    FolderFetchError,
    InvalidFolderReferenceError,
    SubfolderFetchError,
    TracksFolderNotFoundError,
)

# Re-export API functions
create_client = api.create_client
fetch_folder_html = api.fetch_folder_html
fetch_file_metadata = api.fetch_file_metadata
FileMetadata = api.FileMetadata

# Re-export resolution
resolve_folder = resolver.resolve_folder
FolderResolution = resolver.FolderResolution
ResolutionError = resolver.ResolutionError
ErrorKind = resolver.ErrorKind

build_stream_url = stream.build_stream_url
resolve_fetch_url = stream.resolve_fetch_url


__all__ = [
    "DriveError",
    "FolderFetchError",
    "InvalidFolderReferenceError",
    "SubfolderFetchError",
    "TracksFolderNotFoundError",
    "create_client",
    "fetch_folder_html",
    "fetch_file_metadata",
    "FileMetadata",
    "resolve_folder",
    "FolderResolution",
    "ResolutionError",
    "ErrorKind",
    "build_stream_url",
    "resolve_fetch_url",
]
