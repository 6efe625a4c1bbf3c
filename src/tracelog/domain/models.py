from __future__ import annotations

"""
Result Data Models.

Defines the value objects returned by the retention sweeper and the alert
forwarder so that callers can inspect outcomes without parsing log output.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# -----------------------------------------------------------------------------
# RETENTION
# -----------------------------------------------------------------------------

@dataclass
class SweepReport:
    """
    Outcome of a single retention sweep.

    Attributes:
        base_dir: Directory that was scanned.
        removed: Dated directories deleted by the sweep.
        kept: Dated directories still inside the retention window.
        skipped: Entries whose names are not valid YYYY-MM-DD dates.
        failed: Dated directories whose deletion raised an error.
    """
    base_dir: str
    removed: List[str] = field(default_factory=list)
    kept: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


# -----------------------------------------------------------------------------
# ALERTS
# -----------------------------------------------------------------------------

ALERT_DELIVERED = "delivered"
ALERT_SKIPPED = "skipped"
ALERT_FAILED = "failed"


@dataclass(frozen=True)
class AlertEnvelope:
    """A rendered alert ready to be handed to a mail transport."""
    sender: str
    recipients: Tuple[str, ...]
    subject: str
    body: str


@dataclass(frozen=True)
class AlertResult:
    """
    Explicit outcome of an alert dispatch.

    Attributes:
        status: One of 'delivered', 'skipped' (no email configured) or 'failed'.
        error: The exception that caused a failure, if any.
    """
    status: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        """True when nothing went wrong, including the unconfigured no-op case."""
        return self.status != ALERT_FAILED

    @classmethod
    def delivered(cls) -> "AlertResult":
        return cls(ALERT_DELIVERED)

    @classmethod
    def skipped(cls) -> "AlertResult":
        return cls(ALERT_SKIPPED)

    @classmethod
    def failed(cls, error: BaseException) -> "AlertResult":
        return cls(ALERT_FAILED, error)
