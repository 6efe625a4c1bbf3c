from __future__ import annotations

"""
Serialized Writer.

Every tracelog write, whatever its severity or destination, runs under one
process-wide lock so that concurrent callers never interleave partial lines.
Each severity is backed by a private stdlib logger (a channel) whose
handlers are the console streams and log file chosen by the router.
"""

import logging
import sys
import threading
from typing import Dict, List, Optional, Tuple

from tracelog.core.router import Routes, Sink, SinkTarget
from tracelog.domain.levels import Severity

# Single lock shared by all handles unless a handle is given its own
PROCESS_LOCK = threading.Lock()

_UNKNOWN_CALLER: Tuple[str, int, str] = ("(unknown file)", 0, "(unknown function)")


class Channel:
    """
    The write target of one severity.

    Wraps a logger that is not registered with the logging manager and does
    not propagate, so tracelog output never leaks into the root logger.
    """

    def __init__(self, severity: Severity, sink: Sink, handlers: List[logging.Handler]) -> None:
        self.severity = severity
        self.sink = sink
        self._logger = logging.Logger(f"tracelog.{severity.value}", level=severity.level)
        self._logger.propagate = False
        for h in handlers:
            self._logger.addHandler(h)

    @property
    def is_discard(self) -> bool:
        return self.sink.is_discard

    @property
    def handlers(self) -> List[logging.Handler]:
        return list(self._logger.handlers)

    def dispatch(self, line: str, caller: Tuple[str, int, str]) -> None:
        """Build a record attributed to caller and pass it to the handlers."""
        if not self._logger.handlers:
            # Logger.handle would fall back to logging.lastResort
            return
        filename, lineno, func = caller
        record = self._logger.makeRecord(
            self._logger.name, self.severity.level, filename, lineno, line, None, None, func
        )
        record.levelname = self.severity.label
        self._logger.handle(record)


def build_channels(
        routes: Routes,
        stream_handlers: Dict[SinkTarget, logging.Handler],
        file_handler: Optional[logging.Handler] = None,
) -> Dict[Severity, Channel]:
    """
    Materialize resolved routes into one channel per severity.

    Args:
        routes: Output of the destination router.
        stream_handlers: Handlers for SinkTarget.STDOUT and SinkTarget.STDERR.
        file_handler: Handler of the open log file, when file mode is active.

    Returns:
        Dict[Severity, Channel]: Channels keyed by severity.
    """
    channels: Dict[Severity, Channel] = {}
    for severity in Severity:
        sink = routes.for_severity(severity)
        handlers: List[logging.Handler] = []
        if sink.includes_file and file_handler is not None:
            handlers.append(file_handler)
        console = sink.console
        if console is not None:
            handlers.append(stream_handlers[console])
        channels[severity] = Channel(severity, sink, handlers)
    return channels


class SerializedWriter:
    """
    Owns the active channel table and writes lines while holding one lock.

    Channels are looked up inside the lock, so a write never reaches a
    channel that install() has already replaced.
    """

    def __init__(self, lock: Optional[threading.Lock] = None) -> None:
        self._lock = lock if lock is not None else PROCESS_LOCK
        self._channels: Dict[Severity, Channel] = build_channels(Routes(), {})

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    def channel(self, severity: Severity) -> Channel:
        return self._channels[severity]

    def install(self, channels: Dict[Severity, Channel]) -> Dict[Severity, Channel]:
        """Swap in a new channel table and return the previous one."""
        with self._lock:
            previous = self._channels
            self._channels = channels
        return previous

    def write(self, severity: Severity, line: str, call_depth: int = 1) -> None:
        """
        Write one line to the channel of a severity.

        Args:
            severity: Severity selecting the channel.
            line: Fully formatted text without trailing newline.
            call_depth: Frames above this call used for the file:line prefix;
                1 is the direct caller of write.
        """
        if self._channels[severity].is_discard:
            return

        caller = _find_caller(call_depth + 1)
        with self._lock:
            self._channels[severity].dispatch(line, caller)


def _find_caller(depth: int) -> Tuple[str, int, str]:
    """Return (filename, lineno, function) of the frame depth levels up."""
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return _UNKNOWN_CALLER
    code = frame.f_code
    return code.co_filename, frame.f_lineno, code.co_name
