"""Logger construction. Built once in the CLI and handed to every collaborator."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "specgen"

# Carriage return + erase to end of line
CLEAR_LINE = "\r\x1b[K"


class TerminalHandler(logging.StreamHandler):
    """Stream handler that wipes a half-drawn spinner frame before each record."""

    def emit(self, record: logging.LogRecord) -> None:
        isatty = getattr(self.stream, "isatty", None)
        if isatty is not None and isatty():
            self.stream.write(CLEAR_LINE)
        super().emit(record)


def build_logger(verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Return the ``specgen`` logger.

    Verbose mode prints every debug line to stdout; otherwise only warnings
    reach the terminal, on stderr.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = False

    if verbose:
        handler = TerminalHandler(stream or sys.stdout)
        handler.setFormatter(logging.Formatter("🔍 [Verbose] %(message)s"))
        logger.setLevel(logging.DEBUG)
    else:
        handler = TerminalHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter("⚠️ %(message)s"))
        logger.setLevel(logging.WARNING)
    logger.addHandler(handler)
    return logger
