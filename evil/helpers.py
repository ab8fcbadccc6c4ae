"""
# helpers.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""Logging setup for the command line."""
import logging
from datetime import datetime
from typing import Optional

from rich.console import Console, ConsoleRenderable
from rich.logging import RichHandler
from rich.traceback import Traceback

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

VERBOSITY_LEVELS = {
    "off": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

# Logging and the progress bars share one console.
rich_console = Console(stderr=True)


def verbosity_to_level(verbosity: str) -> int:
    try:
        return VERBOSITY_LEVELS[verbosity.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown verbosity '{verbosity}'. Use one of {list(VERBOSITY_LEVELS)}"
        ) from None


class RichModuleNameHandler(RichHandler):
    """Renders the module name instead of the log path."""

    def render(
        self,
        *,
        record: logging.LogRecord,
        traceback: Optional[Traceback],
        message_renderable: ConsoleRenderable,
    ) -> ConsoleRenderable:
        path = record.name
        level = self.get_level_text(record)
        time_format = None if self.formatter is None else self.formatter.datefmt
        log_time = datetime.fromtimestamp(record.created)

        return self._log_render(
            self.console,
            [message_renderable] if not traceback else [message_renderable, traceback],
            log_time=log_time,
            time_format=time_format,
            level=level,
            path=path,
            line_no=record.lineno,
            link_path=record.pathname if self.enable_link_path else None,
        )


def setup_logging(level: int = logging.INFO) -> bool:
    """Configure logging.

    Args:
        level: Logging level. Default: "INFO".
    Returns:
        True if logging was set up successfully.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichModuleNameHandler(level=level, console=rich_console, rich_tracebacks=True)],
        force=True,
    )
    return True
