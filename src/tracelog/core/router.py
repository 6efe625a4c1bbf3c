from __future__ import annotations

"""
Destination Router.

Resolves, once per initialization, which output targets each severity
writes to. The rule cascades from the most verbose bit downwards and the
optional log file only ever mirrors a console target that is already open.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from tracelog.domain.levels import LogLevelMask, Severity


class SinkTarget(Enum):
    """A physical destination a sink can write to."""
    STDOUT = "stdout"
    STDERR = "stderr"
    FILE = "file"


@dataclass(frozen=True)
class Sink:
    """
    Immutable set of targets receiving one severity's lines.

    An empty set is the discard sink.
    """
    targets: FrozenSet[SinkTarget] = frozenset()

    @property
    def is_discard(self) -> bool:
        return not self.targets

    @property
    def includes_file(self) -> bool:
        return SinkTarget.FILE in self.targets

    @property
    def console(self) -> Optional[SinkTarget]:
        """The console stream of this sink, if any."""
        for target in (SinkTarget.STDOUT, SinkTarget.STDERR):
            if target in self.targets:
                return target
        return None

    def with_file(self) -> "Sink":
        """Fan the sink out to the log file; discard sinks stay discard."""
        if self.is_discard:
            return self
        return Sink(self.targets | {SinkTarget.FILE})

    def describe(self) -> str:
        if self.is_discard:
            return "discard"
        order = [SinkTarget.STDOUT, SinkTarget.STDERR, SinkTarget.FILE]
        return "+".join(t.value for t in order if t in self.targets)


DISCARD = Sink()
STDOUT = Sink(frozenset({SinkTarget.STDOUT}))
STDERR = Sink(frozenset({SinkTarget.STDERR}))


@dataclass(frozen=True)
class Routes:
    """The resolved sink of every severity."""
    trace: Sink = DISCARD
    info: Sink = DISCARD
    warning: Sink = DISCARD
    error: Sink = DISCARD

    def for_severity(self, severity: Severity) -> Sink:
        return getattr(self, severity.value)

    @property
    def uses_file(self) -> bool:
        return any(self.for_severity(s).includes_file for s in Severity)


def resolve_routes(mask: LogLevelMask, with_file: bool = False) -> Routes:
    """
    Compute the sink of each severity for a level mask.

    Args:
        mask: Active level mask. Bits are tested independently.
        with_file: Whether a log file is attached.

    Returns:
        Routes: The per-severity sinks.
    """
    trace = info = warning = error = DISCARD

    if mask & LogLevelMask.TRACE:
        trace, info, warning, error = STDOUT, STDOUT, STDOUT, STDERR

    if mask & LogLevelMask.INFO:
        info, warning, error = STDOUT, STDOUT, STDERR

    if mask & LogLevelMask.WARN:
        warning, error = STDOUT, STDERR

    if mask & LogLevelMask.ERROR:
        error = STDERR

    if with_file:
        trace, info, warning, error = (s.with_file() for s in (trace, info, warning, error))

    return Routes(trace=trace, info=info, warning=warning, error=error)
