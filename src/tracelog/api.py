from __future__ import annotations

"""
Process-Wide Logging API.

Module-level helpers bound to one default LoggerHandle, for programs that
want a single logging configuration without passing a handle around.
Libraries and tests should prefer their own LoggerHandle instances.
"""

import sys
from datetime import datetime
from typing import Any, Optional

from tracelog.core.handle import LevelLike, LoggerHandle
from tracelog.domain.config import EmailConfig, TracelogSettings
from tracelog.domain.exceptions import LogDestinationError
from tracelog.domain.levels import LogLevelMask, Severity
from tracelog.domain.models import AlertResult
from tracelog.infra.mail.transports import MailTransport, build_transport

_default_handle = LoggerHandle()


def get_handle() -> LoggerHandle:
    """Return the process-wide default handle."""
    return _default_handle


# -----------------------------------------------------------------------------
# LIFECYCLE
# -----------------------------------------------------------------------------

def start(level: LevelLike) -> None:
    """Start console-only logging on the default handle."""
    _default_handle.start(level)


def start_file(
        level: LevelLike,
        base_dir: str,
        days_to_keep: int,
        *,
        max_bytes: int = 0,
        backup_count: int = 0,
        now: Optional[datetime] = None,
) -> str:
    """
    Start console and file logging on the default handle.

    A log destination that cannot be created is fatal for the process: the
    reason is written to stderr and SystemExit(1) is raised.
    """
    try:
        return _default_handle.start_file(
            level, base_dir, days_to_keep, max_bytes=max_bytes, backup_count=backup_count, now=now
        )
    except LogDestinationError as e:
        print(f"main : Start : {e}", file=sys.stderr)
        raise SystemExit(1) from e


def stop() -> Optional[OSError]:
    """Close the default handle's log file and return the close error, if any."""
    return _default_handle.stop()


def configure_email(config: Optional[EmailConfig], transport: Optional[MailTransport] = None) -> None:
    """Configure alert mail on the default handle; call before start()."""
    _default_handle.configure_email(config, transport)


def start_from_settings(settings: TracelogSettings, handle: Optional[LoggerHandle] = None) -> LoggerHandle:
    """
    Configure email (if any) and start a handle from validated settings.

    Uses the default handle unless one is given. File mode is selected when
    settings.log_dir is set.
    """
    target = handle or _default_handle

    if settings.email is not None:
        transport = build_transport(settings.transport, settings.email, settings.relay_url)
        target.configure_email(settings.email, transport)

    retention = settings.retention
    if retention is None:
        target.start(settings.level)
    elif target is _default_handle:
        start_file(
            settings.level, retention.base_dir, retention.days_to_keep,
            max_bytes=settings.max_bytes, backup_count=settings.backup_count,
        )
    else:
        target.start_file(
            settings.level, retention.base_dir, retention.days_to_keep,
            max_bytes=settings.max_bytes, backup_count=settings.backup_count,
        )
    return target


def level_mask() -> LogLevelMask:
    """Return the level mask of the default handle."""
    return _default_handle.level_mask


# -----------------------------------------------------------------------------
# CALL-SITE HELPERS
# -----------------------------------------------------------------------------

def emit(severity: Severity, title: str, function: str, tag: str, message: Optional[str] = None,
         *args: Any, error: Optional[BaseException] = None, call_depth: int = 1) -> str:
    return _default_handle.emit(severity, title, function, tag, message, *args,
                                error=error, call_depth=call_depth + 1)


def started(title: str, function: str, message: Optional[str] = None, *args: Any, call_depth: int = 1) -> None:
    _default_handle.started(title, function, message, *args, call_depth=call_depth + 1)


def completed(title: str, function: str, message: Optional[str] = None, *args: Any, call_depth: int = 1) -> None:
    _default_handle.completed(title, function, message, *args, call_depth=call_depth + 1)


def completed_error(error: BaseException, title: str, function: str, message: Optional[str] = None,
                    *args: Any, call_depth: int = 1) -> None:
    _default_handle.completed_error(error, title, function, message, *args, call_depth=call_depth + 1)


def trace(title: str, function: str, message: str, *args: Any, call_depth: int = 1) -> None:
    _default_handle.trace(title, function, message, *args, call_depth=call_depth + 1)


def info(title: str, function: str, message: str, *args: Any, call_depth: int = 1) -> None:
    _default_handle.info(title, function, message, *args, call_depth=call_depth + 1)


def warning(title: str, function: str, message: str, *args: Any, call_depth: int = 1) -> None:
    _default_handle.warning(title, function, message, *args, call_depth=call_depth + 1)


def error(err: BaseException, title: str, function: str, message: Optional[str] = None,
          *args: Any, call_depth: int = 1) -> None:
    _default_handle.error(err, title, function, message, *args, call_depth=call_depth + 1)


def alert(subject: str, title: str, function: str, message: str, *args: Any, call_depth: int = 1) -> AlertResult:
    return _default_handle.alert(subject, title, function, message, *args, call_depth=call_depth + 1)


def completed_alert(subject: str, title: str, function: str, message: str, *args: Any,
                    call_depth: int = 1) -> AlertResult:
    return _default_handle.completed_alert(subject, title, function, message, *args, call_depth=call_depth + 1)


def send_alert(subject: str, message: str, *args: Any) -> AlertResult:
    return _default_handle.send_alert(subject, message, *args)


def traced(title: str, function: str):
    """Started/Completed bracket on the default handle (context manager or decorator)."""
    return _default_handle.traced(title, function)
