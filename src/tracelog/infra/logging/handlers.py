from __future__ import annotations

"""
Logging Handlers and Low-Level Utilities.

Provides the handler factories backing every sink target, a shared record
formatter, and the tagging mechanism that lets tracelog recognise its own
handlers. Handlers created here drop write failures silently: a closed or
broken stream must never surface an error to the logging caller.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import IO, Iterable

from tracelog.domain.constants import LINE_DATEFMT, LINE_FORMAT
from tracelog.domain.exceptions import LogDestinationError

# Internal attribute used to tag and identify our own handlers
_HANDLER_TAG_ATTR: str = "_tracelog_handler"


# ==============================================================================
# HANDLER TYPES
# ==============================================================================

class QuietStreamHandler(logging.StreamHandler):
    """StreamHandler that drops records it fails to write."""

    def handleError(self, record: logging.LogRecord) -> None:
        return None


class QuietRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that drops records it fails to write."""

    def handleError(self, record: logging.LogRecord) -> None:
        return None


# ==============================================================================
# FACTORIES
# ==============================================================================

def build_formatter() -> logging.Formatter:
    """Create the formatter producing '<LABEL>: <date> <time> <file>:<line>: <text>'."""
    return logging.Formatter(LINE_FORMAT, datefmt=LINE_DATEFMT)


def create_stream_handler(stream: IO[str], formatter: logging.Formatter) -> logging.Handler:
    """
    Wrap a console stream in a tagged, failure-tolerant handler.

    Args:
        stream: Text stream such as sys.stdout.
        formatter: Formatter shared by all tracelog handlers.

    Returns:
        logging.Handler: The configured handler.
    """
    handler = QuietStreamHandler(stream)
    handler.setFormatter(formatter)
    _tag_handler(handler)
    return handler


def create_rotating_file_handler(
        log_file: str,
        formatter: logging.Formatter,
        max_bytes: int = 0,
        backup_count: int = 0,
) -> RotatingFileHandler:
    """
    Open the log file behind a tagged RotatingFileHandler.

    Args:
        log_file: Target path for the log file.
        formatter: Formatter shared by all tracelog handlers.
        max_bytes: Rollover threshold in bytes; 0 disables rotation.
        backup_count: Number of archived files to keep.

    Returns:
        RotatingFileHandler: Configured handler with the file already open.

    Raises:
        LogDestinationError: If the directory or the file cannot be created.
    """
    try:
        ensure_parent_dir(log_file)
    except OSError as e:
        raise LogDestinationError(f"Failed to create log directory for '{log_file}': {e}") from e

    try:
        fh = QuietRotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        raise LogDestinationError(f"Failed to create log file '{log_file}': {e}") from e

    fh.setFormatter(formatter)
    _tag_handler(fh)
    return fh


def close_handlers(handlers: Iterable[logging.Handler]) -> None:
    """Flush and close tracelog-managed handlers, ignoring foreign ones."""
    for h in handlers:
        if _is_our_handler(h):
            h.close()


# ==============================================================================
# INTERNAL LOGGING UTILITIES
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> None:
    """Mark a handler as an internally-managed tracelog handler."""
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    """Check whether a handler was created by this module."""
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def ensure_parent_dir(path: str) -> None:
    """
    Create the parent directory hierarchy for a target file.

    Args:
        path: Path to the target file.
    """
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.isdir(parent):
        os.makedirs(parent, exist_ok=True)
