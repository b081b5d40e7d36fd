"""Shared fixtures for droplist tests."""

import io
import wave
from pathlib import Path
from typing import Callable

import pytest

from droplist.domain.library.models import Track


def wav_bytes(seconds: float = 1.0, sample_rate: int = 8000) -> bytes:
    """Silent mono 16-bit WAV data of the given length."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(b"\x00\x00" * int(seconds * sample_rate))
    return buffer.getvalue()


@pytest.fixture
def make_wav(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing silent WAV files into tmp_path."""

    def _make(name: str = "Song - Artist.wav", seconds: float = 1.0) -> Path:
        path = tmp_path / name
        path.write_bytes(wav_bytes(seconds))
        return path

    return _make


@pytest.fixture
def make_tracks() -> Callable[[int], list[Track]]:
    """Factory for URL-backed tracks named 'Song N - Artist N.mp3'."""

    def _make(count: int) -> list[Track]:
        return [
            Track.from_url(f"Song {i} - Artist {i}.mp3", f"https://example.com/{i}.mp3")
            for i in range(count)
        ]

    return _make


@pytest.fixture
def wav_data() -> Callable[..., bytes]:
    """Factory returning WAV bytes."""
    return wav_bytes
