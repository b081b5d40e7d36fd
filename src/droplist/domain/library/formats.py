"""
Media type detection by filename extension.

Classification is a case-insensitive suffix match against fixed allow-lists.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

AUDIO_EXTENSIONS = (".mp3", ".wav", ".ogg", ".m4a", ".flac")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".svg")


class MediaType(Enum):
    """Kind of media a filename refers to."""

    AUDIO = "audio"
    IMAGE = "image"


def is_audio_file(file_name: str) -> bool:
    """Check if a filename has an audio extension."""
    return file_name.lower().endswith(AUDIO_EXTENSIONS)


def is_image_file(file_name: str) -> bool:
    """Check if a filename has an image extension."""
    return file_name.lower().endswith(IMAGE_EXTENSIONS)


def get_media_type(file_name: str) -> Optional[MediaType]:
    """Classify a filename as audio, image, or neither (None)."""
    if is_audio_file(file_name):
        return MediaType.AUDIO
    if is_image_file(file_name):
        return MediaType.IMAGE
    return None


def is_supported_format(local_path: Path) -> bool:
    """Check if a local file has a playable audio extension."""
    return local_path.suffix.lower() in AUDIO_EXTENSIONS
