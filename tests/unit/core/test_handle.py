from __future__ import annotations

"""
Unit tests for the LoggerHandle call-site helpers and lifecycle.

Verifies:
1. The text layout of every helper (title : function : tag ...).
2. Severity routing to stdout and stderr.
3. Re-initialization, configure_email preconditions and stop().
4. The traced() bracket and alert forwarding.
"""

import sys

import pytest

from tracelog.core.handle import format_line
from tracelog.domain.exceptions import AlertDeliveryError, ConfigurationError
from tracelog.domain.levels import LogLevelMask, Severity
from tracelog.domain.models import ALERT_DELIVERED, ALERT_FAILED, ALERT_SKIPPED


def _texts(lines):
    """Strip the '<LABEL>: <date> <time> <file>:<line>: ' prefix."""
    return [line.partition(".py:")[2].split(": ", 1)[1] for line in lines]


# -----------------------------------------------------------------------------
# Line layout
# -----------------------------------------------------------------------------

def test_format_line_fields():
    err = ValueError("bad")

    assert format_line("T", "F", "Started") == "T : F : Started"
    assert format_line("T", "F", "Info", "n=%d", (3,)) == "T : F : Info : n=3"
    assert format_line("T", "F", "ERROR", "ctx", (), err) == "T : F : ERROR : ctx : bad"
    assert format_line("T", "F", "ERROR", None, (), err) == "T : F : ERROR : bad"


def test_format_line_tolerates_bad_arguments():
    assert format_line("T", "F", "Info", "%d items", ("many",)) == "T : F : Info : %d items ('many',)"


def test_helper_layouts(handle, streams):
    handle.start(LogLevelMask.TRACE)
    err = RuntimeError("disk")

    handle.started("Main", "Run")
    handle.started("Main", "Run", "Id[%d]", 7)
    handle.trace("Main", "Run", "step %s", "one")
    handle.info("Main", "Run", "hello")
    handle.warning("Main", "Run", "careful")
    handle.completed("Main", "Run")
    handle.error(err, "Main", "Run", "Writing [%s]", "a.txt")
    handle.completed_error(err, "Main", "Run")

    assert _texts(streams.out_lines()) == [
        "Main : Run : Started",
        "Main : Run : Started : Id[7]",
        "Main : Run : Info : step one",
        "Main : Run : Info : hello",
        "Main : Run : Info : careful",
        "Main : Run : Completed",
    ]
    assert _texts(streams.err_lines()) == [
        "Main : Run : ERROR : Writing [a.txt] : disk",
        "Main : Run : Completed : ERROR : disk",
    ]


def test_labels_follow_severity(handle, streams):
    handle.start(LogLevelMask.TRACE)

    handle.trace("M", "F", "t")
    handle.info("M", "F", "i")
    handle.warning("M", "F", "w")
    handle.error(ValueError("e"), "M", "F")

    labels = [line.split(":", 1)[0] for line in streams.out_lines() + streams.err_lines()]
    assert labels == ["TRACE", "INFO", "WARNING", "ERROR"]


def test_prefix_names_the_call_site(handle, streams):
    handle.start(LogLevelMask.INFO)

    handle.info("M", "F", "here")

    assert " test_handle.py:" in streams.out_lines()[0]


def test_emit_returns_line(handle):
    handle.start(LogLevelMask.NONE)

    assert handle.emit(Severity.INFO, "M", "F", "Info", "x=%s", 1) == "M : F : Info : x=1"


# -----------------------------------------------------------------------------
# Lifecycle
# -----------------------------------------------------------------------------

def test_nothing_is_written_before_start(handle, streams):
    handle.error(ValueError("early"), "M", "F")

    assert streams.stdout.getvalue() == ""
    assert streams.stderr.getvalue() == ""
    assert handle.is_running is False


def test_reinitialization_replaces_sinks(handle, streams):
    handle.start(LogLevelMask.TRACE)
    handle.trace("M", "F", "first")

    handle.start(LogLevelMask.ERROR)
    handle.trace("M", "F", "second")
    handle.info("M", "F", "second")
    handle.error(ValueError("kept"), "M", "F")

    assert _texts(streams.out_lines()) == ["M : F : Info : first"]
    assert _texts(streams.err_lines()) == ["M : F : ERROR : kept"]
    assert handle.level_mask == LogLevelMask.ERROR


def test_start_accepts_level_names(handle):
    handle.start("warn|error")

    assert handle.level_mask == LogLevelMask.WARN | LogLevelMask.ERROR
    assert handle.routes.info.is_discard


def test_invalid_level_rejected(handle):
    with pytest.raises(ConfigurationError):
        handle.start(32)


def test_stop_keeps_console_and_reports_no_error(handle, streams):
    handle.start(LogLevelMask.TRACE)

    assert handle.stop() is None
    handle.info("M", "F", "after stop")

    texts = _texts(streams.out_lines())
    assert texts[:2] == ["main : Stop : Started", "main : Stop : Completed"]
    assert texts[-1] == "M : F : Info : after stop"
    assert handle.is_running is False


def test_configure_email_rejected_while_running(handle, email_config, recording_transport):
    handle.start(LogLevelMask.INFO)

    with pytest.raises(ConfigurationError):
        handle.configure_email(email_config, recording_transport)

    handle.stop()
    handle.configure_email(email_config, recording_transport)
    assert handle.email == email_config


# -----------------------------------------------------------------------------
# traced()
# -----------------------------------------------------------------------------

def test_traced_brackets_block(handle, streams):
    handle.start(LogLevelMask.TRACE)

    with handle.traced("Main", "Work"):
        handle.info("Main", "Work", "inside")

    assert _texts(streams.out_lines()) == [
        "Main : Work : Started",
        "Main : Work : Info : inside",
        "Main : Work : Completed",
    ]
    assert all(" test_handle.py:" in line for line in streams.out_lines())


def test_traced_logs_and_reraises(handle, streams):
    handle.start(LogLevelMask.TRACE)

    with pytest.raises(KeyError):
        with handle.traced("Main", "Work"):
            raise KeyError("missing")

    assert _texts(streams.out_lines()) == ["Main : Work : Started"]
    assert _texts(streams.err_lines()) == ["Main : Work : Completed : ERROR : 'missing'"]


def test_traced_as_decorator(handle, streams):
    handle.start(LogLevelMask.TRACE)

    @handle.traced("Main", "Decorated")
    def work():
        return 42

    call_line = sys._getframe().f_lineno + 1
    assert work() == 42

    lines = streams.out_lines()
    assert _texts(lines) == ["Main : Decorated : Started", "Main : Decorated : Completed"]
    assert all(f" test_handle.py:{call_line}: " in line for line in lines)


def test_traced_decorator_logs_and_reraises(handle, streams):
    handle.start(LogLevelMask.TRACE)

    @handle.traced("Main", "Decorated")
    def fail():
        raise ValueError("nope")

    with pytest.raises(ValueError):
        fail()

    assert _texts(streams.err_lines()) == ["Main : Decorated : Completed : ERROR : nope"]
    assert " test_handle.py:" in streams.err_lines()[0]


# -----------------------------------------------------------------------------
# Alerts
# -----------------------------------------------------------------------------

def test_alert_without_email_only_logs(handle, streams):
    handle.start(LogLevelMask.ERROR)

    result = handle.alert("Subject", "Main", "Check", "value %d", 9)

    assert result.status == ALERT_SKIPPED
    assert _texts(streams.err_lines()) == ["Main : Check : ALERT : value 9"]


def test_alert_logs_and_sends(handle, streams, email_config, recording_transport):
    handle.configure_email(email_config, recording_transport)
    handle.start(LogLevelMask.ERROR)

    result = handle.alert("Disk", "Main", "Check", "95 percent")
    done = handle.completed_alert("Done", "Main", "Check", "finished")

    assert result.status == ALERT_DELIVERED and done.status == ALERT_DELIVERED
    assert _texts(streams.err_lines()) == [
        "Main : Check : ALERT : 95 percent",
        "Main : Check : Completed : ALERT : finished",
    ]
    assert [e.subject for e in recording_transport.sent] == ["Disk", "Done"]
    assert "Main : Check : ALERT : 95 percent" in recording_transport.sent[0].body


def test_alert_is_sent_even_when_error_sink_is_discarded(handle, streams, email_config, recording_transport):
    handle.configure_email(email_config, recording_transport)
    handle.start(LogLevelMask.NONE)

    result = handle.alert("Subject", "Main", "Check", "quiet")

    assert result.status == ALERT_DELIVERED
    assert streams.stderr.getvalue() == ""


def test_failed_alert_is_logged(handle, streams, email_config, failing_transport):
    handle.configure_email(email_config, failing_transport(AlertDeliveryError("refused")))
    handle.start(LogLevelMask.ERROR)

    result = handle.alert("Subject", "Main", "Check", "msg")

    assert result.status == ALERT_FAILED
    errors = _texts(streams.err_lines())
    assert errors[0] == "Main : Check : ALERT : msg"
    assert errors[1] == "main : send_alert : ERROR : Alert delivery failed [Subject] : refused"


def test_send_alert_writes_no_line(handle, streams, email_config, recording_transport):
    handle.configure_email(email_config, recording_transport)
    handle.start(LogLevelMask.TRACE)

    result = handle.send_alert("Subject", "count=%d", 3)

    assert result.status == ALERT_DELIVERED
    assert streams.stdout.getvalue() == "" and streams.stderr.getvalue() == ""
    assert "count=3" in recording_transport.sent[0].body
