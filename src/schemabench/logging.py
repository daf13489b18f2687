"""Logging setup for schemabench.

Progress lines (one per completed trial) go to stderr as plain text, in
the familiar ``name x 1,234 ops/sec ±0.52% (100 runs sampled)`` shape.
Warnings and errors get a colored level prefix. An optional log file
receives everything at DEBUG with timestamps.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

_LOGGER_NAME = "schemabench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_LEVEL_COLORS = {
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class _ConsoleFormatter(logging.Formatter):
    """Plain messages below WARNING, a styled ``LEVEL:`` prefix above."""

    def __init__(self, *, color: bool) -> None:
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno < logging.WARNING:
            return message
        prefix = f"{record.levelname.lower()}:"
        if self.color:
            prefix = click.style(prefix, fg=_LEVEL_COLORS.get(record.levelno, "red"), bold=True)
        return f"{prefix} {message}"


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    color: bool | None = None,
) -> logging.Logger:
    """Configure and return the schemabench logger.

    Args:
        verbose: Show DEBUG messages on the console.
        quiet: Hide trial progress; only warnings and errors. Ignored if
            *verbose* is True.
        log_file: Also log everything at DEBUG to this file.
        color: Style level prefixes. Defaults to whether stderr is a tty.

    Returns:
        The configured schemabench logger.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if color is None:
        color = sys.stderr.isatty()

    console = logging.StreamHandler()
    if verbose:
        console.setLevel(logging.DEBUG)
    elif quiet:
        console.setLevel(logging.WARNING)
    else:
        console.setLevel(logging.INFO)
    console.setFormatter(_ConsoleFormatter(color=color))
    logger.addHandler(console)

    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger
