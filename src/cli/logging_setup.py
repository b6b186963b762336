"""Logging configuration for the CLI.

Core modules only call `logging.getLogger(__name__)`; handlers are installed
here, once, so library use of the core stays silent by default.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(level: str, *, console: Console | None = None) -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING

    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console or Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
            )
        ],
        force=True,
    )
    # httpx logs every request at INFO; keep it one level quieter than ours.
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(resolved, logging.WARNING))
