"""
Unified output system using Loguru.
User-facing messages go to the console and the log file; everything else
goes to the log file only.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"

# When quiet, log() writes to the log file only
_quiet = False


def setup_loguru(
    log_file: Optional[Path], level: str = "INFO", console_output: bool = False
) -> None:
    """
    Configure loguru sinks.

    Args:
        log_file: Path to log file (None disables the file sink)
        level: Minimum level for logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also log to stderr
    """
    # Remove default handler
    logger.remove()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation="10 MB",
            retention=5,  # Keep 5 backup files
            level=level,
            format=LOG_FORMAT,
            enqueue=False,
        )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def set_quiet(quiet: bool) -> None:
    """Suppress (or restore) console printing from log()."""
    global _quiet
    _quiet = quiet


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints for the user.

    Use this instead of print() for user-facing messages that should also be logged.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    if _quiet or level == "debug":
        return

    if level in ("warning", "error"):
        print(message, file=sys.stderr)
    else:
        print(message)
