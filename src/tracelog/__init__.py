from __future__ import annotations

"""
tracelog: leveled trace logging with file mirroring, log directory
retention and email alerts.
"""

from tracelog.api import (
    alert,
    completed,
    completed_alert,
    completed_error,
    configure_email,
    emit,
    error,
    get_handle,
    info,
    level_mask,
    send_alert,
    start,
    start_file,
    start_from_settings,
    started,
    stop,
    trace,
    traced,
    warning,
)
from tracelog.core.handle import LoggerHandle
from tracelog.domain.config import EmailConfig, RetentionPolicy, TracelogSettings, load_settings
from tracelog.domain.exceptions import (
    AlertDeliveryError,
    ConfigurationError,
    LogDestinationError,
    TracelogError,
)
from tracelog.domain.levels import LogLevelMask, Severity
from tracelog.domain.models import AlertResult, SweepReport

LEVEL_TRACE = LogLevelMask.TRACE
LEVEL_INFO = LogLevelMask.INFO
LEVEL_WARN = LogLevelMask.WARN
LEVEL_ERROR = LogLevelMask.ERROR

__version__ = "1.0.0"

__all__ = [
    "LoggerHandle",
    "LogLevelMask",
    "Severity",
    "LEVEL_TRACE",
    "LEVEL_INFO",
    "LEVEL_WARN",
    "LEVEL_ERROR",
    "EmailConfig",
    "RetentionPolicy",
    "TracelogSettings",
    "load_settings",
    "AlertResult",
    "SweepReport",
    "TracelogError",
    "ConfigurationError",
    "LogDestinationError",
    "AlertDeliveryError",
    "get_handle",
    "start",
    "start_file",
    "start_from_settings",
    "stop",
    "configure_email",
    "level_mask",
    "emit",
    "started",
    "completed",
    "completed_error",
    "trace",
    "info",
    "warning",
    "error",
    "alert",
    "completed_alert",
    "send_alert",
    "traced",
]
