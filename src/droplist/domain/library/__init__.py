"""Library domain - remote folder listings and playable tracks.

This domain handles:
- Entry and Track data models
- Listing page extraction
- Artist image matching
- Folder and file reference parsing
"""

# Models
from .models import Entry, EntryKind, LocalFile, Track, generate_track_id

# Formats
from .formats import (
    AUDIO_EXTENSIONS,
    IMAGE_EXTENSIONS,
    MediaType,
    get_media_type,
    is_audio_file,
    is_image_file,
    is_supported_format,
)

# Listing extraction
from .listing import (
    ListingParser,
    RegexListingParser,
    extract_folder_title,
    parse_listing,
)

# Artist images
from .artist_images import match_artist_images

# References
from .folder_refs import extract_file_id, extract_folder_id, is_valid_id

__all__ = [
    # Models
    "Entry",
    "EntryKind",
    "LocalFile",
    "Track",
    "generate_track_id",
    # Formats
    "AUDIO_EXTENSIONS",
    "IMAGE_EXTENSIONS",
    "MediaType",
    "get_media_type",
    "is_audio_file",
    "is_image_file",
    "is_supported_format",
    # Listing
    "ListingParser",
    "RegexListingParser",
    "extract_folder_title",
    "parse_listing",
    # Artist images
    "match_artist_images",
    # References
    "extract_file_id",
    "extract_folder_id",
    "is_valid_id",
]
