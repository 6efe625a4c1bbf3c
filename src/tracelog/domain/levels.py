from __future__ import annotations

"""
Severity and Level Mask Definitions.

Defines the bitmask used to select active severities and the four
independently gatable severities themselves, together with the labels
and numeric levels handed to the standard logging machinery.
"""

import re
from enum import Enum, IntFlag
from typing import Dict, Union

from tracelog.domain.exceptions import ConfigurationError


class LogLevelMask(IntFlag):
    """Bitmask selecting which severities produce visible output."""
    NONE = 0
    TRACE = 1  # Log everything
    INFO = 2   # Log Info, Warnings and Errors
    WARN = 4   # Log Warning and Errors
    ERROR = 8  # Log just Errors


ALL_BITS: int = int(LogLevelMask.TRACE | LogLevelMask.INFO | LogLevelMask.WARN | LogLevelMask.ERROR)


class Severity(Enum):
    """The four log channels, ordered from most to least verbose."""
    TRACE = "trace"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def level(self) -> int:
        return _NUMERIC_LEVELS[self]


_LABELS: Dict[Severity, str] = {
    Severity.TRACE: "TRACE",
    Severity.INFO: "INFO",
    Severity.WARNING: "WARNING",
    Severity.ERROR: "ERROR",
}

# Numeric levels aligned with the stdlib logging scale (TRACE sits below DEBUG)
_NUMERIC_LEVELS: Dict[Severity, int] = {
    Severity.TRACE: 5,
    Severity.INFO: 20,
    Severity.WARNING: 30,
    Severity.ERROR: 40,
}

_NAME_MAP: Dict[str, LogLevelMask] = {
    "TRACE": LogLevelMask.TRACE,
    "INFO": LogLevelMask.INFO,
    "WARN": LogLevelMask.WARN,
    "WARNING": LogLevelMask.WARN,
    "ERROR": LogLevelMask.ERROR,
    "NONE": LogLevelMask.NONE,
}

_SEPARATORS = re.compile(r"[|,+\s]+")


def parse_level_mask(value: Union[int, str, LogLevelMask]) -> LogLevelMask:
    """
    Convert an integer or a textual level description into a LogLevelMask.

    Accepts plain integers (``5``), single names (``"info"``) and
    combinations separated by ``|``, ``,`` or ``+`` (``"TRACE|ERROR"``).

    Raises:
        ConfigurationError: If the value contains unknown bits or names.
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid level mask: {value!r}")

    if isinstance(value, int):
        if value < 0 or value & ~ALL_BITS:
            raise ConfigurationError(f"Level mask {value} contains unknown bits.")
        return LogLevelMask(value)

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_level_mask(int(text))

        mask = LogLevelMask.NONE
        for token in _SEPARATORS.split(text.upper()):
            if not token:
                continue
            if token not in _NAME_MAP:
                raise ConfigurationError(f"Unknown level name: {token!r}")
            mask |= _NAME_MAP[token]
        return mask

    raise ConfigurationError(f"Invalid level mask type: {type(value).__name__}")
