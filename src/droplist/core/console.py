"""Rich consoles for CLI rendering.

Playlist tables go to stdout; progress and status lines go to stderr so
piped output stays a clean listing.
"""

from rich.console import Console

_consoles: dict[bool, Console] = {}


def get_console(stderr: bool = False) -> Console:
    """Shared Rich Console for stdout, or for stderr when `stderr` is set."""
    console = _consoles.get(stderr)
    if console is None:
        console = Console(stderr=stderr)
        _consoles[stderr] = console
    return console


def safe_print(message: str, style: str | None = None, stderr: bool = False) -> None:
    """Print a line through the shared console.

    Args:
        message: Text to print (Rich markup is not interpreted)
        style: Optional Rich style string (e.g., "bold red", "dim")
        stderr: Send the line to stderr instead of stdout
    """
    get_console(stderr).print(message, style=style, markup=False, highlight=False)


def status(message: str) -> None:
    """Dimmed progress line on stderr."""
    safe_print(message, style="dim", stderr=True)
