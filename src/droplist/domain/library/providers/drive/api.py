"""
Shared-folder HTTP operations.

Fetches folder listing pages and file metadata. Listing pages are plain
HTML (no structured API), requested with a browser-like identity.
"""

import re
from typing import NamedTuple, Optional
from urllib.parse import unquote

import httpx
from loguru import logger

from droplist.core.config import DEFAULT_USER_AGENT, DriveConfig

from .exceptions import FolderFetchError
from .stream import DEFAULT_PROXY_PATH, build_download_url

FOLDER_URL = "https://drive.google.com/drive/folders/{folder_id}"

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class FileMetadata(NamedTuple):
    """Headers reported for a remote file (HEAD request)."""

    content_type: str
    content_length: Optional[int]
    accept_ranges: str
    url: str  # Proxy path that streams this file
    name: Optional[str] = None  # Filename from Content-Disposition, if sent


def parse_content_disposition_filename(header: str) -> Optional[str]:
    """Filename from a Content-Disposition header (RFC 5987 form preferred)."""
    match = re.search(r"filename\*=(?:UTF-8|utf-8)''([^;]+)", header)
    if match:
        return unquote(match.group(1).strip().strip('"')) or None
    match = re.search(r'filename="?([^";]+)"?', header)
    if match:
        return match.group(1).strip() or None
    return None


def build_folder_url(folder_id: str) -> str:
    return FOLDER_URL.format(folder_id=folder_id)


def create_client(config: Optional[DriveConfig] = None) -> httpx.AsyncClient:
    """Create an async client with browser headers and configured timeout.

    The caller owns the client and must close it (use `async with`).
    """
    config = config or DriveConfig()
    headers = dict(BROWSER_HEADERS)
    headers["User-Agent"] = config.user_agent or DEFAULT_USER_AGENT
    return httpx.AsyncClient(
        headers=headers,
        timeout=config.request_timeout,
        follow_redirects=True,
    )


async def fetch_folder_html(client: httpx.AsyncClient, folder_id: str) -> str:
    """
    Fetch the listing page for a folder.

    Args:
        client: HTTP client (see create_client)
        folder_id: Folder id

    Returns:
        Page HTML

    Raises:
        FolderFetchError: On transport failure or non-2xx status
    """
    url = build_folder_url(folder_id)
    logger.debug(f"Fetching folder listing: {url}")

    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise FolderFetchError(folder_id, detail=str(e) or type(e).__name__) from e

    if not response.is_success:
        raise FolderFetchError(
            folder_id, status_code=response.status_code, detail=response.reason_phrase
        )

    return response.text


async def fetch_file_metadata(
    client: httpx.AsyncClient, file_id: str, proxy_path: str = DEFAULT_PROXY_PATH
) -> FileMetadata:
    """
    Read content type, size and range support for a file without downloading it.

    Raises:
        FolderFetchError: On transport failure or non-2xx status
    """
    try:
        response = await client.head(build_download_url(file_id))
    except httpx.HTTPError as e:
        raise FolderFetchError(file_id, detail=str(e) or type(e).__name__) from e

    if not response.is_success:
        raise FolderFetchError(
            file_id, status_code=response.status_code, detail=response.reason_phrase
        )

    length = response.headers.get("content-length")
    return FileMetadata(
        content_type=response.headers.get("content-type", "audio/mpeg"),
        content_length=int(length) if length and length.isdigit() else None,
        accept_ranges=response.headers.get("accept-ranges", "bytes"),
        url=f"{proxy_path}?id={file_id}",
        name=parse_content_disposition_filename(
            response.headers.get("content-disposition", "")
        ),
    )
