from __future__ import annotations

"""
Logger Handle.

Holds everything one logging configuration needs: the level mask, the
routes resolved from it, the serialized writer with its channels, the
optional log file and the alert forwarder. Every public helper is a thin
call onto the single emit() primitive.

Typical use::

    log = LoggerHandle()
    log.start_file(LogLevelMask.TRACE, "/var/log/myapp", days_to_keep=7)

    with log.traced("main", "Example"):
        log.info("main", "Example", "Processing %d items", 3)

    log.stop()
"""

import functools
import logging
import sys
from datetime import date, datetime, timezone
from typing import IO, Any, Callable, Dict, Optional, Union

from tracelog.core.alerts import AlertForwarder
from tracelog.core.router import Routes, SinkTarget, resolve_routes
from tracelog.core.sweeper import SWEEP_FUNCTION, RetentionSweeper
from tracelog.core.writer import SerializedWriter, build_channels
from tracelog.domain.config import EmailConfig
from tracelog.domain.constants import (
    FIELD_SEPARATOR,
    INTERNAL_TITLE,
    TAG_ALERT,
    TAG_COMPLETED,
    TAG_COMPLETED_ALERT,
    TAG_COMPLETED_ERROR,
    TAG_ERROR,
    TAG_INFO,
    TAG_STARTED,
)
from tracelog.domain.exceptions import ConfigurationError
from tracelog.domain.levels import LogLevelMask, Severity, parse_level_mask
from tracelog.domain.models import AlertResult, SweepReport
from tracelog.infra.fs import build_log_paths
from tracelog.infra.logging.handlers import (
    build_formatter,
    close_handlers,
    create_rotating_file_handler,
    create_stream_handler,
)
from tracelog.infra.mail.transports import MailTransport, SmtpTransport

LevelLike = Union[LogLevelMask, int, str]


# -----------------------------------------------------------------------------
# LINE FORMATTING
# -----------------------------------------------------------------------------

def format_line(
        title: str,
        function: str,
        tag: str,
        message: Optional[str] = None,
        args: tuple = (),
        error: Optional[BaseException] = None,
) -> str:
    """Build 'title : function : tag[ : message][ : error]'."""
    parts = [str(title), str(function), tag]
    if message is not None:
        parts.append(_render(message, args))
    if error is not None:
        parts.append(str(error))
    return FIELD_SEPARATOR.join(parts)


def _render(message: Any, args: tuple) -> str:
    if not args:
        return str(message)
    try:
        return str(message) % args
    except (TypeError, ValueError):
        return f"{message} {args!r}"


# -----------------------------------------------------------------------------
# HANDLE
# -----------------------------------------------------------------------------

class LoggerHandle:
    """
    An independently configurable tracelog instance.

    Args:
        stdout: Stream used for stdout sinks; defaults to sys.stdout at start time.
        stderr: Stream used for stderr sinks; defaults to sys.stderr at start time.
        lock: Serialization lock; defaults to the process-wide lock.
    """

    def __init__(
            self,
            *,
            stdout: Optional[IO[str]] = None,
            stderr: Optional[IO[str]] = None,
            lock: Optional[Any] = None,
    ) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._writer = SerializedWriter(lock)
        self._formatter = build_formatter()

        self._mask = LogLevelMask.NONE
        self._routes = Routes()
        self._file_handler: Optional[logging.Handler] = None
        self._log_file: Optional[str] = None
        self._running = False

        self._email: Optional[EmailConfig] = None
        self._transport: Optional[MailTransport] = None
        self._forwarder = AlertForwarder(report=self._report_alert_failure)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def level_mask(self) -> LogLevelMask:
        return self._mask

    @property
    def routes(self) -> Routes:
        return self._routes

    @property
    def log_file(self) -> Optional[str]:
        return self._log_file

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def email(self) -> Optional[EmailConfig]:
        return self._email

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self, level: LevelLike) -> None:
        """
        Log to the console only, showing the severities enabled by level.

        Calling start again is a hard reset: all previous sinks are replaced
        and a previously opened log file is closed.
        """
        self._turn_on(parse_level_mask(level))

    def start_file(
            self,
            level: LevelLike,
            base_dir: str,
            days_to_keep: int,
            *,
            max_bytes: int = 0,
            backup_count: int = 0,
            now: Optional[datetime] = None,
    ) -> str:
        """
        Log to the console and mirror every visible line into a new log file.

        The file is created as <base_dir>/<YYYY-MM-DD>/<YYYY-MM-DDTHH-MM-SS>.txt
        (UTC) and dated directories older than days_to_keep are swept once.

        Returns:
            str: Path of the log file.

        Raises:
            LogDestinationError: If the directory or file cannot be created.
            ValueError: If days_to_keep is negative.
        """
        mask = parse_level_mask(level)
        if days_to_keep < 0:
            raise ValueError(f"days_to_keep must be >= 0, got {days_to_keep}")

        current = now or datetime.now(timezone.utc)
        if current.tzinfo is not None:
            current = current.astimezone(timezone.utc)

        directory, path = build_log_paths(base_dir, current)
        file_handler = create_rotating_file_handler(path, self._formatter, max_bytes, backup_count)

        self._turn_on(mask, file_handler, path)
        try:
            self.sweep(base_dir, days_to_keep, today=current.date(), protect=directory)
        except Exception as e:
            # Cleanup is best effort; logging is already running
            self.completed_error(e, INTERNAL_TITLE, SWEEP_FUNCTION)
        return path

    def stop(self) -> Optional[OSError]:
        """
        Close the log file, if any; console sinks stay active.

        Returns:
            Optional[OSError]: The error raised while closing the file.
        """
        self.started(INTERNAL_TITLE, "Stop")

        error: Optional[OSError] = None
        file_handler = self._file_handler
        if file_handler is not None:
            self.trace(INTERNAL_TITLE, "Stop", "Closing File")
            self._install(self._mask, None, None)
            try:
                file_handler.close()
            except OSError as e:
                error = e

        self._running = False
        self.completed(INTERNAL_TITLE, "Stop")
        return error

    def configure_email(
            self,
            config: Optional[EmailConfig],
            transport: Optional[MailTransport] = None,
    ) -> None:
        """
        Set the email configuration used by alerts.

        Must happen before start()/start_file() (or after stop()); the last
        call wins. Passing None disables alert mail.

        Raises:
            ConfigurationError: If the handle is running.
        """
        if self._running:
            raise ConfigurationError("configure_email must be called before start() or after stop().")

        if config is not None and transport is None:
            transport = SmtpTransport(config)

        self._email = config
        self._transport = transport if config is not None else None
        self._forwarder = AlertForwarder(self._email, self._transport, self._report_alert_failure)

    def sweep(
            self,
            base_dir: str,
            days_to_keep: int,
            *,
            today: Optional[date] = None,
            protect: Optional[str] = None,
    ) -> SweepReport:
        """Run the retention sweeper, logging through this handle."""
        return RetentionSweeper(self).sweep(base_dir, days_to_keep, today=today, protect=protect)

    def _turn_on(
            self,
            mask: LogLevelMask,
            file_handler: Optional[logging.Handler] = None,
            log_file: Optional[str] = None,
    ) -> None:
        previous_file = self._file_handler
        self._install(mask, file_handler, log_file)
        self._running = True

        if previous_file is not None and previous_file is not file_handler:
            close_handlers([previous_file])

    def _install(
            self,
            mask: LogLevelMask,
            file_handler: Optional[logging.Handler],
            log_file: Optional[str],
    ) -> None:
        routes = resolve_routes(mask, with_file=file_handler is not None)
        stream_handlers: Dict[SinkTarget, logging.Handler] = {
            SinkTarget.STDOUT: create_stream_handler(self._stdout or sys.stdout, self._formatter),
            SinkTarget.STDERR: create_stream_handler(self._stderr or sys.stderr, self._formatter),
        }
        self._writer.install(build_channels(routes, stream_handlers, file_handler))

        self._mask = mask
        self._routes = routes
        self._file_handler = file_handler
        self._log_file = log_file

    # -------------------------------------------------------------------------
    # Core primitive
    # -------------------------------------------------------------------------

    def emit(
            self,
            severity: Severity,
            title: str,
            function: str,
            tag: str,
            message: Optional[str] = None,
            *args: Any,
            error: Optional[BaseException] = None,
            call_depth: int = 1,
    ) -> str:
        """
        Format a line and write it to the sink of severity.

        Args:
            severity: Channel to write to.
            title: First field, usually the component or task name.
            function: Name of the function being traced.
            tag: Fixed tag such as 'Started' or 'ERROR'.
            message: Optional printf-style message, formatted with args.
            error: Optional error appended as the last field.
            call_depth: Frames above emit used for the file:line prefix.

        Returns:
            str: The formatted line (without prefix).
        """
        line = format_line(title, function, tag, message, args, error)
        self._writer.write(severity, line, call_depth + 1)
        return line

    # -------------------------------------------------------------------------
    # Call-site helpers
    # -------------------------------------------------------------------------

    def started(self, title: str, function: str, message: Optional[str] = None, *args: Any,
                call_depth: int = 1) -> None:
        self.emit(Severity.TRACE, title, function, TAG_STARTED, message, *args, call_depth=call_depth + 1)

    def completed(self, title: str, function: str, message: Optional[str] = None, *args: Any,
                  call_depth: int = 1) -> None:
        self.emit(Severity.TRACE, title, function, TAG_COMPLETED, message, *args, call_depth=call_depth + 1)

    def completed_error(self, error: BaseException, title: str, function: str, message: Optional[str] = None,
                        *args: Any, call_depth: int = 1) -> None:
        self.emit(Severity.ERROR, title, function, TAG_COMPLETED_ERROR, message, *args,
                  error=error, call_depth=call_depth + 1)

    def trace(self, title: str, function: str, message: str, *args: Any, call_depth: int = 1) -> None:
        self.emit(Severity.TRACE, title, function, TAG_INFO, message, *args, call_depth=call_depth + 1)

    def info(self, title: str, function: str, message: str, *args: Any, call_depth: int = 1) -> None:
        self.emit(Severity.INFO, title, function, TAG_INFO, message, *args, call_depth=call_depth + 1)

    def warning(self, title: str, function: str, message: str, *args: Any, call_depth: int = 1) -> None:
        self.emit(Severity.WARNING, title, function, TAG_INFO, message, *args, call_depth=call_depth + 1)

    def error(self, error: BaseException, title: str, function: str, message: Optional[str] = None,
              *args: Any, call_depth: int = 1) -> None:
        self.emit(Severity.ERROR, title, function, TAG_ERROR, message, *args,
                  error=error, call_depth=call_depth + 1)

    def alert(self, subject: str, title: str, function: str, message: str, *args: Any,
              call_depth: int = 1) -> AlertResult:
        """Write an ALERT line to the error sink and forward it by mail."""
        forwarder = self._forwarder
        line = self.emit(Severity.ERROR, title, function, TAG_ALERT, message, *args, call_depth=call_depth + 1)
        return forwarder.send(subject, line)

    def completed_alert(self, subject: str, title: str, function: str, message: str, *args: Any,
                        call_depth: int = 1) -> AlertResult:
        """Write a 'Completed : ALERT' line to the error sink and forward it by mail."""
        forwarder = self._forwarder
        line = self.emit(Severity.ERROR, title, function, TAG_COMPLETED_ALERT, message, *args,
                         call_depth=call_depth + 1)
        return forwarder.send(subject, line)

    def send_alert(self, subject: str, message: str, *args: Any) -> AlertResult:
        """Send an alert by mail without writing a log line."""
        return self._forwarder.send(subject, _render(message, args))

    def traced(self, title: str, function: str) -> "TracedBlock":
        """
        Bracket a block (or, used as a decorator, a function) with
        Started/Completed lines; an escaping exception is logged with
        'Completed : ERROR' and re-raised.
        """
        return TracedBlock(self, title, function)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _report_alert_failure(self, function: str, error: BaseException, message: str) -> None:
        self.emit(Severity.ERROR, INTERNAL_TITLE, function, TAG_ERROR, message, error=error)


# -----------------------------------------------------------------------------
# TRACED BLOCKS
# -----------------------------------------------------------------------------

class TracedBlock:
    """
    Context manager and decorator emitting Started/Completed around a block.

    The file:line prefix names the 'with' statement, or the call of the
    decorated function.
    """

    def __init__(self, log: LoggerHandle, title: str, function: str, call_depth: int = 2) -> None:
        self._log = log
        self._title = title
        self._function = function
        self._call_depth = call_depth

    def __enter__(self) -> None:
        self._log.started(self._title, self._function, call_depth=self._call_depth)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self._log.completed(self._title, self._function, call_depth=self._call_depth)
        elif issubclass(exc_type, Exception):
            self._log.completed_error(exc, self._title, self._function, call_depth=self._call_depth)
        return False

    def __call__(self, func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            # one extra frame: wrapper sits between the call site and __enter__
            with TracedBlock(self._log, self._title, self._function, self._call_depth + 1):
                return func(*args, **kwargs)
        return wrapper
