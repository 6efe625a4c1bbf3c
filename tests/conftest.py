from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. In-memory console streams and isolated logger handles.
3. A recording mail transport and a sample email configuration.
"""

import io
import os
import sys
import threading
from dataclasses import dataclass
from typing import Generator, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from tracelog.core.handle import LoggerHandle  # noqa: E402
from tracelog.domain.config import EmailConfig  # noqa: E402
from tracelog.domain.models import AlertEnvelope  # noqa: E402
from tracelog.infra.mail.transports import MailTransport  # noqa: E402


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------
class RecordingTransport(MailTransport):
    """
    Mail transport that stores every envelope it receives.

    Exceptions queued in 'failures' are raised by successive deliver calls
    (None means succeed for that call).
    """

    def __init__(self, failures: Optional[List[Optional[BaseException]]] = None) -> None:
        self.sent: List[AlertEnvelope] = []
        self.calls = 0
        self.failures = list(failures or [])

    def deliver(self, envelope: AlertEnvelope) -> None:
        self.calls += 1
        failure = self.failures.pop(0) if self.failures else None
        if failure is not None:
            raise failure
        self.sent.append(envelope)


@dataclass
class ConsoleStreams:
    stdout: io.StringIO
    stderr: io.StringIO

    def out_lines(self) -> List[str]:
        return self.stdout.getvalue().splitlines()

    def err_lines(self) -> List[str]:
        return self.stderr.getvalue().splitlines()


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def streams() -> ConsoleStreams:
    """Provide in-memory replacements for stdout and stderr."""
    return ConsoleStreams(io.StringIO(), io.StringIO())


@pytest.fixture
def handle(streams: ConsoleStreams) -> Generator[LoggerHandle, None, None]:
    """
    Provide an isolated LoggerHandle writing to the in-memory streams.

    The handle gets its own lock and is stopped after the test so that an
    open log file is always released.
    """
    h = LoggerHandle(stdout=streams.stdout, stderr=streams.stderr, lock=threading.Lock())
    yield h
    h.stop()


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def failing_transport():
    """Factory for transports raising the given exceptions on successive calls."""
    def _make(*failures: Optional[BaseException]) -> RecordingTransport:
        return RecordingTransport(list(failures))
    return _make


@pytest.fixture
def email_config() -> EmailConfig:
    """Return a complete email configuration pointing at a dummy server."""
    return EmailConfig(
        host="smtp.example.com",
        port=587,
        username="alerts@example.com",
        password="secret",
        to=("ops@example.com", "dev@example.com"),
    )
