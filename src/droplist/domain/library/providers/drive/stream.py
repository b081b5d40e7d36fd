"""
Stream URL resolution for remote file ids.

With an API key, files stream straight from the media endpoint. Without
one, playback goes through a local proxy path that serves byte ranges.
"""

from typing import Optional
from urllib.parse import parse_qs, quote, urlparse

MEDIA_URL = "https://www.googleapis.com/drive/v3/files/{file_id}?alt=media&key={api_key}"
DOWNLOAD_URL = "https://drive.google.com/uc?export=download&id={file_id}"
DEFAULT_PROXY_PATH = "/api/drive-file"


def build_stream_url(
    file_id: str, api_key: Optional[str] = None, proxy_path: str = DEFAULT_PROXY_PATH
) -> str:
    """
    Build a playable URL for a file id.

    Args:
        file_id: Remote file id
        api_key: Privileged API key; when set, a direct media URL is returned
        proxy_path: Local proxy path used when no key is configured

    Returns:
        Direct media URL or "<proxy_path>?id=<file_id>"
    """
    if api_key:
        return MEDIA_URL.format(file_id=quote(file_id), api_key=quote(api_key))
    return f"{proxy_path}?id={quote(file_id)}"


def build_download_url(file_id: str) -> str:
    """Public download URL that the proxy fetches bytes from."""
    return DOWNLOAD_URL.format(file_id=quote(file_id))


def resolve_fetch_url(url: str, proxy_path: str = DEFAULT_PROXY_PATH) -> str:
    """
    Map a playable URL to one that can be fetched directly.

    Proxy paths are only meaningful to the local byte-transport layer, so
    they are rewritten to the public download URL the proxy would use.
    Other URLs are returned unchanged.
    """
    if not url.startswith(proxy_path):
        return url
    file_id = parse_qs(urlparse(url).query).get("id", [""])[0]
    return build_download_url(file_id) if file_id else url
