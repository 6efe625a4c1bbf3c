from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Owns the on-disk layout of file-mode logging: one directory per UTC
calendar day below the base directory and one timestamped file per process
start, plus the directory listing used by the retention sweeper.
"""

import os
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from tracelog.domain.constants import (
    DIRECTORY_DATE_FORMAT,
    FILE_TIMESTAMP_FORMAT,
    LOG_FILE_EXTENSION,
)

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_base_dir(path: str) -> str:
    """
    Normalize a base directory string, expanding '~' and environment variables.

    Trailing separators are removed.
    """
    p = os.path.expandvars(os.path.expanduser(path.strip()))
    stripped = p.rstrip("/\\")
    return stripped or p


def build_log_paths(base_dir: str, now: Optional[datetime] = None) -> Tuple[str, str]:
    """
    Compute the dated directory and the log file path for a process start.

    Layout: <base_dir>/<YYYY-MM-DD>/<YYYY-MM-DDTHH-MM-SS>.txt (UTC).

    Args:
        base_dir: Base directory of all log folders.
        now: Reference instant; defaults to the current UTC time.

    Returns:
        Tuple[str, str]: (directory path, file path).
    """
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is not None:
        current = current.astimezone(timezone.utc)

    directory = os.path.join(normalize_base_dir(base_dir), current.strftime(DIRECTORY_DATE_FORMAT))
    file_name = current.strftime(FILE_TIMESTAMP_FORMAT).replace(" ", "-") + LOG_FILE_EXTENSION
    return directory, os.path.join(directory, file_name)


def utc_today() -> date:
    """Return the current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


# -----------------------------------------------------------------------------
# DIRECTORY SCANNING
# -----------------------------------------------------------------------------

def list_subdirectories(base_dir: str) -> List[str]:
    """
    List the names of the immediate subdirectories of base_dir, sorted.

    Raises:
        OSError: If base_dir cannot be listed.
    """
    names: List[str] = []
    with os.scandir(base_dir) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=False):
                names.append(entry.name)
    return sorted(names)
