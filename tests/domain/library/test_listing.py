"""Tests for listing page extraction."""

from droplist.domain.library.listing import (
    RegexListingParser,
    extract_attribute_entries,
    extract_folder_title,
    parse_listing,
)
from droplist.domain.library.models import Entry, EntryKind

AUDIO_ID = "1aUdIoFiLeIdEnTiFiEr_0001"
IMAGE_ID = "1iMaGeFiLeIdEnTiFiEr_0001"
FOLDER_ID = "1fOlDeRiDeNtIfIeR-000001"


def file_row(entry_id: str, name: str) -> str:
    return (
        f'<tr data-id="{entry_id}" class="row"><td><div class="a-file-icon"></div>'
        f"<strong>{name}</strong></td><td>me</td></tr>"
    )


def folder_row(entry_id: str, name: str) -> str:
    return (
        f'<tr data-id="{entry_id}" class="row"><td><div class="a-folder-icon"></div>'
        f"<strong>{name}</strong></td><td>me</td></tr>"
    )


def page(*rows: str, title: str = "My Mix - Google Drive") -> str:
    return f"<html><head><title>{title}</title></head><body><table>{''.join(rows)}</table></body></html>"


class TestPrimaryExtraction:
    """Tests for row-based extraction."""

    def test_files_and_folders(self) -> None:
        """File and folder rows are extracted in document order."""
        html = page(
            file_row(AUDIO_ID, "Song (Artist X).mp3"),
            folder_row(FOLDER_ID, "artist"),
            file_row(IMAGE_ID, "Artist X.png"),
        )
        entries = parse_listing(html)
        assert entries == [
            Entry(AUDIO_ID, "Song (Artist X).mp3", EntryKind.FILE),
            Entry(FOLDER_ID, "artist", EntryKind.FOLDER),
            Entry(IMAGE_ID, "Artist X.png", EntryKind.FILE),
        ]

    def test_classification(self) -> None:
        """Extension decides audio/image; folders have no media type."""
        html = page(
            file_row(AUDIO_ID, "Song.FLAC"),
            file_row(IMAGE_ID, "Cover.jpeg"),
            folder_row(FOLDER_ID, "photos.png"),
        )
        audio, image, folder = parse_listing(html)
        assert audio.is_audio and not audio.is_image
        assert image.is_image and not image.is_audio
        assert folder.is_folder and folder.media_type is None

    def test_title_attribute_pattern(self) -> None:
        """Names can come from data-title when no emphasis tag exists."""
        html = page(f'<tr data-id="{AUDIO_ID}"><td data-title="Track One.ogg"></td></tr>')
        assert parse_listing(html) == [Entry(AUDIO_ID, "Track One.ogg")]

    def test_aria_label_pattern(self) -> None:
        """Names can come from an accessible label with trailing text."""
        html = page(f'<tr data-id="{AUDIO_ID}"><td aria-label="Track One.m4a Audio"></td></tr>')
        assert parse_listing(html) == [Entry(AUDIO_ID, "Track One.m4a")]

    def test_name_with_parentheses_kept_whole(self) -> None:
        """Names with parentheses are not truncated."""
        html = page(file_row(AUDIO_ID, "Song (Live) (Band).mp3"))
        assert parse_listing(html)[0].name == "Song (Live) (Band).mp3"

    def test_html_entities_unescaped(self) -> None:
        """Entities in names are decoded."""
        html = page(file_row(AUDIO_ID, "Rock &amp; Roll.mp3"))
        assert parse_listing(html)[0].name == "Rock & Roll.mp3"

    def test_row_without_name_skipped(self) -> None:
        """Rows with no recognizable name are dropped."""
        html = page(
            f'<tr data-id="{IMAGE_ID}"><td>readme.txt</td></tr>',
            file_row(AUDIO_ID, "Song.wav"),
        )
        assert [e.id for e in parse_listing(html)] == [AUDIO_ID]

    def test_duplicate_ids_first_wins(self) -> None:
        """A repeated id keeps its first row."""
        html = page(file_row(AUDIO_ID, "First.mp3"), file_row(AUDIO_ID, "Second.mp3"))
        entries = parse_listing(html)
        assert len(entries) == 1
        assert entries[0].name == "First.mp3"


class TestFallbackExtraction:
    """Tests for the attribute-pair scan."""

    def test_used_when_no_rows(self) -> None:
        """Id/title pairs are found when there are no rows."""
        html = f'<div><span data-id="{AUDIO_ID}" data-title="Fallback.mp3"></span></div>'
        assert parse_listing(html) == [Entry(AUDIO_ID, "Fallback.mp3")]

    def test_short_ids_rejected(self) -> None:
        """Ids that don't look like item ids are ignored."""
        html = '<span data-id="short" data-title="Fallback.mp3"></span>'
        assert parse_listing(html) == []

    def test_folder_marker_in_tag(self) -> None:
        """Folder markers in the tag make a folder entry."""
        html = f'<div data-id="{FOLDER_ID}" class="folder-tile" data-title="artist"></div>'
        assert parse_listing(html) == [Entry(FOLDER_ID, "artist", EntryKind.FOLDER)]

    def test_seen_ids_not_repeated(self) -> None:
        """Ids already produced are skipped by the fallback scan."""
        html = f'<span data-id="{AUDIO_ID}" data-title="Fallback.mp3"></span>'
        assert extract_attribute_entries(html, seen={AUDIO_ID}) == []

    def test_id_in_both_passes_yields_one_entry(self) -> None:
        """An id visible to both scans appears once."""
        html = page(
            f'<tr data-id="{AUDIO_ID}" data-title="Song.mp3"><td><strong>Song.mp3</strong></td></tr>'
        )
        entries = RegexListingParser().parse(html)
        assert [e.id for e in entries] == [AUDIO_ID]


class TestNoRows:
    """Pages without recognizable rows."""

    def test_empty_list_for_unrelated_html(self) -> None:
        """Unrelated markup parses to an empty list."""
        assert parse_listing("<html><body><p>Sign in</p></body></html>") == []

    def test_empty_string(self) -> None:
        """Empty input parses to an empty list."""
        assert parse_listing("") == []

    def test_malformed_markup(self) -> None:
        """Broken markup never raises."""
        assert parse_listing('<tr data-id="abc"<<<>>" <strong>') == []

    def test_non_string_input(self) -> None:
        """Wrong input types degrade to an empty list."""
        assert RegexListingParser().parse(None) == []  # type: ignore[arg-type]


class TestFolderTitle:
    """Tests for extract_folder_title."""

    def test_strips_service_suffix(self) -> None:
        """The English service suffix is removed."""
        assert extract_folder_title(page(title="My Mix - Google Drive")) == "My Mix"

    def test_strips_localized_suffixes(self) -> None:
        """Localized suffixes and dash variants are removed."""
        assert extract_folder_title(page(title="Музыка - Google Диск")) == "Музыка"
        assert extract_folder_title(page(title="Musik – Google Drev")) == "Musik"
        assert extract_folder_title(page(title="音楽 - Google ドライブ")) == "音楽"

    def test_unescapes_entities(self) -> None:
        """Entities in the title are decoded."""
        assert extract_folder_title(page(title="Mix &amp; Match - Google Drive")) == "Mix & Match"

    def test_missing_title(self) -> None:
        """No <title> gives None."""
        assert extract_folder_title("<html></html>") is None

    def test_parser_method(self) -> None:
        """The parser exposes the same title extraction."""
        assert RegexListingParser().folder_title(page(title="Beats - Google Drive")) == "Beats"
