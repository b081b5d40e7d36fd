"""Tests for stream URL resolution."""

from droplist.domain.library.providers.drive.stream import (
    build_download_url,
    build_stream_url,
    resolve_fetch_url,
)


class TestBuildStreamUrl:
    """Tests for build_stream_url."""

    def test_proxy_without_key(self) -> None:
        """Without an API key the local proxy path is used."""
        assert build_stream_url("abc") == "/api/drive-file?id=abc"

    def test_custom_proxy_path(self) -> None:
        """The proxy path is configurable."""
        assert build_stream_url("abc", proxy_path="/stream") == "/stream?id=abc"

    def test_direct_url_with_key(self) -> None:
        """With an API key files stream from the media endpoint."""
        url = build_stream_url("abc", api_key="KEY")
        assert url == "https://www.googleapis.com/drive/v3/files/abc?alt=media&key=KEY"


class TestResolveFetchUrl:
    """Tests for resolve_fetch_url."""

    def test_proxy_path_mapped_to_download(self) -> None:
        """Proxy paths become the public download URL."""
        assert resolve_fetch_url("/api/drive-file?id=abc") == build_download_url("abc")

    def test_other_urls_unchanged(self) -> None:
        """Absolute URLs pass through."""
        url = "https://example.com/a.mp3"
        assert resolve_fetch_url(url) == url
