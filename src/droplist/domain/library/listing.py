"""
Folder listing extraction from shared-folder HTML pages.

The hosting service exposes only an HTML listing page, so entries are
scraped from markup. Scraping is best-effort: when the page structure
changes the parser degrades to an empty result and never raises.

Callers depend on the ListingParser protocol, not on the regex strategy,
so the strategy can be replaced (e.g. by a real markup parser) without
touching the folder resolver.
"""

import html as html_lib
import re
from typing import Iterable, Optional, Protocol

from loguru import logger

from .formats import AUDIO_EXTENSIONS, IMAGE_EXTENSIONS
from .models import Entry, EntryKind

# Row-like fragments carrying a per-item identifier
_ROW_RE = re.compile(
    r"<(?P<tag>tr|li)\b(?P<attrs>[^>]*?\bdata-id=\"(?P<id>[A-Za-z0-9_-]+)\"[^>]*)>"
    r"(?P<body>.*?)</(?P=tag)>",
    re.IGNORECASE | re.DOTALL,
)

_MEDIA_EXT = "|".join(re.escape(ext) for ext in AUDIO_EXTENSIONS + IMAGE_EXTENSIONS)

# Name patterns, first match wins. File names are anchored on a known
# media extension to limit truncation on names containing quotes/parens.
_FILE_NAME_PATTERNS = (
    re.compile(rf"<strong[^>]*>\s*([^<]+?(?:{_MEDIA_EXT}))\s*</strong>", re.IGNORECASE),
    re.compile(rf"\bdata-title=\"([^\"]+?(?:{_MEDIA_EXT}))\"", re.IGNORECASE),
    re.compile(rf"\baria-label=\"([^\"]+?(?:{_MEDIA_EXT}))(?=[\s\"])", re.IGNORECASE),
    re.compile(rf"(?<![\w-])title=\"([^\"]+?(?:{_MEDIA_EXT}))\"", re.IGNORECASE),
)

_FOLDER_NAME_PATTERNS = (
    re.compile(r"<strong[^>]*>\s*([^<]+?)\s*</strong>", re.IGNORECASE),
    re.compile(r"\bdata-title=\"([^\"]+)\"", re.IGNORECASE),
    re.compile(r"\baria-label=\"([^\"]+?)(?:\s+(?:Shared\s+)?[Ff]older)?\"", re.IGNORECASE),
    re.compile(r"(?<![\w-])title=\"([^\"]+)\"", re.IGNORECASE),
)

# Icon class names, mime markers and literal glyphs that mark folder rows
_FOLDER_MARKER_RE = re.compile(
    r"application/vnd\.google-apps\.folder"
    r"|\bclass=\"[^\"]*\b[\w-]*folder[\w-]*\b[^\"]*\""
    r"|\bdata-type=\"folder\""
    r"|\U0001F4C1|\U0001F4C2|&#128193;|&#x1F4C1;",
    re.IGNORECASE,
)

# Looser scan: id attribute followed by a title-like attribute in the same tag
_FALLBACK_RE = re.compile(
    r"<[^>]*?\bdata-id=\"(?P<id>[A-Za-z0-9_-]{20,})\"[^>]*?"
    r"\b(?:data-title|data-tooltip|aria-label|title)=\"(?P<name>[^\"]*)\"[^>]*>",
    re.IGNORECASE | re.DOTALL,
)

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)

# Service-name suffixes appended to page titles, in several locales
_SERVICE_NAMES = (
    "Google Drive",
    "Google Диск",
    "Google Drev",
    "Google Dysk",
    "Google Disk",
    "Google Disku",
    "Google Drive™",
    "Google ドライブ",
    "Google 드라이브",
    "Google 云端硬盘",
    "Google 雲端硬碟",
    "Google ড্রাইভ",
    "Google ड्राइव",
    "Google Δίσκος",
    "Google Драйв",
    "Google Dysk Google",
)
_TITLE_SUFFIX_RE = re.compile(
    r"\s*[-–—|:]\s*(?:%s)\s*$" % "|".join(re.escape(name) for name in _SERVICE_NAMES)
)


class ListingParser(Protocol):
    """Contract for turning a listing page into entries.

    parse() never raises. An empty list is the soft "no rows found" signal,
    distinct from a transport failure.
    """

    def parse(self, html: str) -> list[Entry]:
        ...

    def folder_title(self, html: str) -> Optional[str]:
        ...


def _clean_name(raw: str) -> str:
    return html_lib.unescape(raw).strip()


def _has_folder_marker(fragment: str) -> bool:
    return _FOLDER_MARKER_RE.search(fragment) is not None


def _first_match(patterns: Iterable[re.Pattern], fragment: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(fragment)
        if match:
            name = _clean_name(match.group(1))
            if name:
                return name
    return None


def extract_row_entries(html: str) -> list[Entry]:
    """Primary extraction: one entry per row fragment with a data-id.

    Rows without a recognizable name are skipped. Duplicate ids keep the
    first occurrence.
    """
    entries: list[Entry] = []
    seen: set[str] = set()

    for row in _ROW_RE.finditer(html):
        entry_id = row.group("id")
        if entry_id in seen:
            continue

        fragment = row.group(0)
        if _has_folder_marker(fragment):
            kind = EntryKind.FOLDER
            name = _first_match(_FOLDER_NAME_PATTERNS, row.group("body")) or _first_match(
                _FOLDER_NAME_PATTERNS, row.group("attrs")
            )
        else:
            kind = EntryKind.FILE
            name = _first_match(_FILE_NAME_PATTERNS, fragment)

        if not name:
            continue

        seen.add(entry_id)
        entries.append(Entry(id=entry_id, name=name, kind=kind))

    return entries


def extract_attribute_entries(html: str, seen: Optional[set[str]] = None) -> list[Entry]:
    """Fallback extraction: id/title attribute pairs anywhere in the document.

    Args:
        html: Page HTML
        seen: Ids already produced by another pass; these are not repeated

    Returns:
        Entries for ids not in `seen`
    """
    seen = set(seen or ())
    entries: list[Entry] = []

    for match in _FALLBACK_RE.finditer(html):
        entry_id = match.group("id")
        name = _clean_name(match.group("name"))
        if not name or entry_id in seen:
            continue
        seen.add(entry_id)
        kind = EntryKind.FOLDER if _has_folder_marker(match.group(0)) else EntryKind.FILE
        entries.append(Entry(id=entry_id, name=name, kind=kind))

    return entries


def extract_folder_title(html: str) -> Optional[str]:
    """Human-readable folder name from the page <title>, service suffix removed."""
    match = _TITLE_RE.search(html)
    if not match:
        return None
    title = _clean_name(re.sub(r"\s+", " ", match.group(1)))
    # Strip repeatedly: some pages chain "Name - Google Drive - Google Drive"
    previous = None
    while previous != title:
        previous = title
        title = _TITLE_SUFFIX_RE.sub("", title).strip()
    return title or None


class RegexListingParser:
    """Regex-based scraper for shared-folder listing pages."""

    def parse(self, html: str) -> list[Entry]:
        """Extract deduplicated entries from listing HTML.

        Runs row extraction first, then the looser attribute scan only if
        row extraction found nothing.
        """
        try:
            entries = extract_row_entries(html)
            if not entries:
                entries = extract_attribute_entries(html, seen={e.id for e in entries})
        except Exception:
            logger.exception("Listing extraction failed; treating page as empty")
            return []

        if not entries:
            logger.warning("No rows found in listing page")
        else:
            logger.debug(f"Extracted {len(entries)} entries from listing page")
        return entries

    def folder_title(self, html: str) -> Optional[str]:
        try:
            return extract_folder_title(html)
        except Exception:
            logger.exception("Could not extract folder title")
            return None


_default_parser = RegexListingParser()


def parse_listing(html: str) -> list[Entry]:
    """Parse listing HTML with the default parser."""
    return _default_parser.parse(html)


def get_default_parser() -> ListingParser:
    return _default_parser
