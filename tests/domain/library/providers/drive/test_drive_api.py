"""Tests for shared-folder HTTP operations."""

import asyncio

import httpx
import pytest

from droplist.core.config import DriveConfig
from droplist.domain.library.providers.drive.api import (
    build_folder_url,
    create_client,
    fetch_file_metadata,
    fetch_folder_html,
    parse_content_disposition_filename,
)
from droplist.domain.library.providers.drive.exceptions import DriveError, FolderFetchError


def run_with(handler, coro_factory):
    """Run coro_factory(client) against a mock transport."""

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await coro_factory(client)

    return asyncio.run(_run())


class TestFetchFolderHtml:
    """Tests for fetch_folder_html."""

    def test_returns_page_text(self) -> None:
        """A 2xx response returns the body."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text="<html>ok</html>")

        html = run_with(handler, lambda client: fetch_folder_html(client, "folder123"))
        assert html == "<html>ok</html>"
        assert seen == [build_folder_url("folder123")]

    def test_non_2xx_raises_with_status(self) -> None:
        """Non-2xx responses raise FolderFetchError carrying the status."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        with pytest.raises(FolderFetchError) as exc_info:
            run_with(handler, lambda client: fetch_folder_html(client, "folder123"))
        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    def test_transport_error_raises(self) -> None:
        """Connection failures raise FolderFetchError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DriveError) as exc_info:
            run_with(handler, lambda client: fetch_folder_html(client, "folder123"))
        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)


class TestFetchFileMetadata:
    """Tests for fetch_file_metadata."""

    def test_reads_headers(self) -> None:
        """Content type, size, range support and filename are reported."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "HEAD"
            assert request.url.params["id"] == "file123"
            return httpx.Response(
                200,
                headers={
                    "Content-Type": "audio/flac",
                    "Content-Length": "4096",
                    "Accept-Ranges": "bytes",
                    "Content-Disposition": 'attachment; filename="Song - Band.flac"',
                },
            )

        metadata = run_with(handler, lambda client: fetch_file_metadata(client, "file123"))
        assert metadata.content_type == "audio/flac"
        assert metadata.content_length == 4096
        assert metadata.accept_ranges == "bytes"
        assert metadata.url == "/api/drive-file?id=file123"
        assert metadata.name == "Song - Band.flac"

    def test_defaults_when_headers_missing(self) -> None:
        """Missing headers fall back to defaults."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200)

        metadata = run_with(handler, lambda client: fetch_file_metadata(client, "file123"))
        assert metadata.content_type == "audio/mpeg"
        assert metadata.accept_ranges == "bytes"
        assert metadata.name is None

    def test_error_status_raises(self) -> None:
        """Non-2xx responses raise FolderFetchError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403)

        with pytest.raises(FolderFetchError):
            run_with(handler, lambda client: fetch_file_metadata(client, "file123"))


class TestContentDisposition:
    """Tests for parse_content_disposition_filename."""

    def test_extended_form_preferred(self) -> None:
        """RFC 5987 filenames are decoded."""
        header = "attachment; filename=\"x.mp3\"; filename*=UTF-8''Caf%C3%A9.mp3"
        assert parse_content_disposition_filename(header) == "Café.mp3"

    def test_missing(self) -> None:
        """No filename gives None."""
        assert parse_content_disposition_filename("inline") is None


class TestCreateClient:
    """Tests for create_client."""

    def test_browser_identity(self) -> None:
        """The client sends the configured user agent."""
        client = create_client(DriveConfig(user_agent="TestAgent/1.0"))
        try:
            assert client.headers["User-Agent"] == "TestAgent/1.0"
            assert "text/html" in client.headers["Accept"]
        finally:
            asyncio.run(client.aclose())
