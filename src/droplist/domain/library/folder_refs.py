"""
Folder and file reference parsing.

A reference is either a share URL or a raw item id. Ids are opaque
strings of letters, digits, dash and underscore.
"""

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

# Raw ids are long opaque tokens
_RAW_ID_RE = re.compile(r"^[A-Za-z0-9_-]{20,}$")
_FOLDER_PATH_RE = re.compile(r"/folders/([A-Za-z0-9_-]+)")
_FILE_PATH_RE = re.compile(r"/d/([A-Za-z0-9_-]+)")


def is_valid_id(value: str) -> bool:
    """Check whether a string looks like a raw item id."""
    return bool(_RAW_ID_RE.match(value))


def _query_id(ref: str) -> Optional[str]:
    values = parse_qs(urlparse(ref).query).get("id")
    if values and re.fullmatch(r"[A-Za-z0-9_-]+", values[0]):
        return values[0]
    return None


def extract_folder_id(ref: str) -> Optional[str]:
    """
    Extract a folder id from a share URL or raw id.

    Accepts:
        https://drive.google.com/drive/folders/<id>?usp=sharing
        https://drive.google.com/drive/u/0/folders/<id>
        https://drive.google.com/open?id=<id>
        <id>

    Returns:
        Folder id, or None if the reference is not recognized
    """
    ref = ref.strip()
    if not ref:
        return None

    match = _FOLDER_PATH_RE.search(ref)
    if match:
        return match.group(1)

    if "://" in ref:
        return _query_id(ref)

    return ref if is_valid_id(ref) else None


def extract_file_id(ref: str) -> Optional[str]:
    """
    Extract a file id from a share URL or raw id.

    Accepts /file/d/<id>/view style URLs, ?id=<id> URLs, or a raw id.
    Folder URLs are not file references.
    """
    ref = ref.strip()
    if not ref or _FOLDER_PATH_RE.search(ref):
        return None

    match = _FILE_PATH_RE.search(ref)
    if match:
        return match.group(1)

    if "://" in ref or ref.startswith("/"):
        return _query_id(ref)

    return ref if is_valid_id(ref) else None
