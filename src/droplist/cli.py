"""
droplist CLI - Entry point

Resolves shared folders or local files into playlists and prints them,
along with the play order the queue engine produces.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.table import Table

from droplist.core.config import Config, ensure_directories, get_data_dir, load_config
from droplist.core.console import get_console, safe_print, status
from droplist.core.output import log, setup_loguru
from droplist.domain.library.providers.drive.resolver import FolderResolution
from droplist.domain.playback.session import PlaybackSession
from droplist.utils.parsers import format_duration, parse_track_name


def render_playlist(session: PlaybackSession) -> None:
    """Print the loaded playlist as a table."""
    table = Table(title=session.folder_name or "Playlist")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Artist", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("Image", style="dim")

    for index, track in enumerate(session.tracks, start=1):
        title, artist = parse_track_name(track.name)
        image = "✓" if track.artist_image_url else ""
        table.add_row(str(index), title, artist, format_duration(session.duration_for(track)), image)

    console = get_console()
    console.print(table)
    console.print(
        f"{len(session.tracks)} tracks, total {format_duration(session.total_duration())}",
        style="bold",
    )


def report_error(resolution: FolderResolution) -> int:
    log(resolution.error.message, level="error")
    return 1


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    if getattr(args, "tracks_folder", None) is not None:
        config.drive.tracks_folder_name = args.tracks_folder
    if getattr(args, "artist_folder", None):
        config.drive.artist_folder_name = args.artist_folder


async def run_list(config: Config, reference: str, probe: bool) -> int:
    async with PlaybackSession(config) as session:
        resolution = await session.load_folder(reference)
        if not resolution.ok:
            return report_error(resolution)
        if probe:
            status("Probing durations...")
            await session.wait_for_background()
        render_playlist(session)
    return 0


async def run_load(config: Config, source: str, probe: bool) -> int:
    if source == "-":
        lines = sys.stdin.read().splitlines()
    else:
        try:
            lines = Path(source).read_text(encoding="utf-8").splitlines()
        except OSError as e:
            log(f"Cannot read {source}: {e}", level="error")
            return 1

    async with PlaybackSession(config) as session:
        resolution = await session.load_references(lines)
        if not resolution.ok:
            return report_error(resolution)
        if probe:
            status("Probing durations...")
            await session.wait_for_background()
        render_playlist(session)
    return 0


async def run_local(config: Config, paths: list[str]) -> int:
    async with PlaybackSession(config) as session:
        tracks = await session.load_local_files(paths)
        if not tracks:
            log("No supported audio files given", level="error")
            return 1
        status("Reading durations...")
        await session.wait_for_background()
        render_playlist(session)
    return 0


async def run_order(config: Config, reference: str, shuffle: bool, count: Optional[int]) -> int:
    async with PlaybackSession(config) as session:
        resolution = await session.load_folder(reference)
        if not resolution.ok:
            return report_error(resolution)

        engine = session.engine
        engine.set_shuffle(shuffle)
        steps = count if count is not None else len(session.tracks)
        for position in range(1, steps + 1):
            track = engine.current_track
            safe_print(f"{position:>3}. {track.name}")
            engine.next()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="droplist",
        description="droplist - play shared folders as playlists",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Log debug output to stderr")

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List the tracks of a shared folder")
    list_parser.add_argument("reference", help="Folder link or id")
    list_parser.add_argument("--tracks-folder", help="Subfolder holding the tracks")
    list_parser.add_argument("--artist-folder", help="Subfolder holding artist images")
    list_parser.add_argument("--probe", action="store_true", help="Probe track durations")

    load_parser = subparsers.add_parser(
        "load", help="Build a playlist from folder/file links, one per line"
    )
    load_parser.add_argument("source", help="File with one link per line ('-' for stdin)")
    load_parser.add_argument("--probe", action="store_true", help="Probe track durations")

    local_parser = subparsers.add_parser("local", help="List local audio files")
    local_parser.add_argument("paths", nargs="+", help="Audio files")

    order_parser = subparsers.add_parser("order", help="Print the play order of a folder")
    order_parser.add_argument("reference", help="Folder link or id")
    order_parser.add_argument("--shuffle", action="store_true", help="Use shuffle mode")
    order_parser.add_argument("--count", type=int, help="Number of tracks to print")
    order_parser.add_argument("--tracks-folder", help="Subfolder holding the tracks")

    return parser


def main() -> None:
    """Main entry point for the droplist command."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    config = load_config()
    ensure_directories()
    log_file = Path(config.logging.log_file) if config.logging.log_file else get_data_dir() / "droplist.log"
    setup_loguru(
        log_file,
        level="DEBUG" if args.debug else config.logging.level,
        console_output=args.debug or config.logging.console_output,
    )
    apply_overrides(config, args)

    if args.subcommand == "list":
        sys.exit(asyncio.run(run_list(config, args.reference, args.probe)))

    elif args.subcommand == "load":
        sys.exit(asyncio.run(run_load(config, args.source, args.probe)))

    elif args.subcommand == "local":
        sys.exit(asyncio.run(run_local(config, args.paths)))

    elif args.subcommand == "order":
        sys.exit(asyncio.run(run_order(config, args.reference, args.shuffle, args.count)))


if __name__ == "__main__":
    main()
