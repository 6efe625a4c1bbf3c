from __future__ import annotations

"""
Unit tests for Domain Models.

Verifies:
1. AlertResult factories and the 'ok' semantics.
2. Immutability of frozen dataclasses.
3. Default values of SweepReport.
"""

from dataclasses import FrozenInstanceError

import pytest

from tracelog.domain.models import AlertEnvelope, AlertResult, SweepReport


def test_alert_result_factories():
    error = RuntimeError("x")

    assert AlertResult.delivered().ok
    assert AlertResult.skipped().ok
    failed = AlertResult.failed(error)
    assert not failed.ok
    assert failed.error is error


def test_envelope_is_frozen():
    envelope = AlertEnvelope("a@example.com", ("b@example.com",), "S", "B")

    with pytest.raises(FrozenInstanceError):
        envelope.subject = "changed"


def test_sweep_report_defaults():
    report = SweepReport(base_dir="/logs")

    assert report.removed == [] and report.kept == [] and report.skipped == [] and report.failed == []
    assert report.ok

    report.failed.append("/logs/2020-01-01")
    assert not report.ok
