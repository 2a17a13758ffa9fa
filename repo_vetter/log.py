"""Console diagnostics for repo-vetter.

stdout is reserved for NDJSON records, so every diagnostic goes to stderr
(or to LOG_FILE when configured).
"""

from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.markup import escape

from repo_vetter.config import LOG_LEVEL_DEBUG, LOG_LEVEL_INFO, LOG_LEVEL_SILENT

console = Console(stderr=True)
_level = LOG_LEVEL_SILENT
_log_handle: TextIO | None = None


def configure_logging(level: int, log_file: Path | None = None) -> None:
    """
    Set the active log level and destination.

    Args:
        level: 0 (errors only), 1 (info) or 2 (debug).
        log_file: Append diagnostics to this file instead of stderr.
    """
    global console, _level, _log_handle
    _level = level
    close()

    if log_file is None:
        console = Console(stderr=True)
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    _log_handle = open(log_file, "a", encoding="utf-8")
    console = Console(file=_log_handle, no_color=True, width=200)


def close() -> None:
    """Close LOG_FILE, if open, and fall back to stderr."""
    global console, _log_handle
    if _log_handle is None:
        return
    _log_handle.close()
    _log_handle = None
    console = Console(stderr=True)


def get_level() -> int:
    return _level


def error(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]", highlight=False)


def info(message: str) -> None:
    if _level >= LOG_LEVEL_INFO:
        console.print(escape(message), highlight=False)


def debug(message: str) -> None:
    if _level >= LOG_LEVEL_DEBUG:
        console.print(f"[dim]{escape(message)}[/dim]", highlight=False)
