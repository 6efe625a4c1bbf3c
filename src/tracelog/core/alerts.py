from __future__ import annotations

"""
Alert Forwarder.

Renders alert messages with the configured template and hands them to a
mail transport. Expected delivery failures come back as an explicit
AlertResult; anything unexpected is contained by a single supervisor
boundary that captures the stack trace, attempts one secondary system
alert and reports the failure without letting it reach the caller.
"""

import traceback
from string import Template
from typing import Callable, Optional

from tracelog.domain.config import EmailConfig
from tracelog.domain.constants import SYSTEM_ALERT_SUBJECT
from tracelog.domain.exceptions import AlertDeliveryError
from tracelog.domain.models import AlertEnvelope, AlertResult
from tracelog.infra.mail.transports import MailTransport

# Receives (function name, error, message) for every failed dispatch
ErrorReporter = Callable[[str, BaseException, str], None]


def render_alert(config: EmailConfig, subject: str, message: str) -> AlertEnvelope:
    """
    Render the email template for one alert.

    Raises:
        KeyError, ValueError: If the template references unknown placeholders
            or is malformed.
    """
    body = Template(config.template).substitute(
        From=config.sender,
        To=",".join(config.to),
        Subject=subject,
        Message=message,
    )
    return AlertEnvelope(
        sender=config.sender,
        recipients=tuple(config.to),
        subject=subject,
        body=body,
    )


class AlertForwarder:
    """
    Sends alerts through a transport when email is configured.

    Args:
        config: Email settings; None turns every send into a no-op.
        transport: Delivery mechanism; required when config is set.
        report: Callback used to log failed dispatches.
    """

    def __init__(
            self,
            config: Optional[EmailConfig] = None,
            transport: Optional[MailTransport] = None,
            report: Optional[ErrorReporter] = None,
    ) -> None:
        if config is not None and transport is None:
            raise ValueError("A transport is required when email is configured.")
        self._config = config
        self._transport = transport
        self._report = report

    @property
    def configured(self) -> bool:
        return self._config is not None

    @property
    def config(self) -> Optional[EmailConfig]:
        return self._config

    def send(self, subject: str, message: str) -> AlertResult:
        """
        Send an alert, never raising.

        Returns:
            AlertResult: 'skipped' without configuration, otherwise the
                delivery outcome.
        """
        if self._config is None:
            return AlertResult.skipped()
        return self._supervised("send_alert", subject, message, secondary=True)

    # -------------------------------------------------------------------------
    # Supervisor boundary
    # -------------------------------------------------------------------------

    def _supervised(self, function: str, subject: str, message: str, secondary: bool) -> AlertResult:
        try:
            return self._dispatch(subject, message)
        except AlertDeliveryError as e:
            self._notify(function, e, f"Alert delivery failed [{subject}]")
            return AlertResult.failed(e)
        except Exception as e:
            stack = traceback.format_exc()
            if secondary:
                self._supervised(
                    function,
                    SYSTEM_ALERT_SUBJECT,
                    f"{function} : PANIC Deferred [{e}] : Stack Trace : {stack}",
                    secondary=False,
                )
            self._notify(function, e, f"PANIC Deferred [{subject}]")
            return AlertResult.failed(e)

    def _dispatch(self, subject: str, message: str) -> AlertResult:
        envelope = render_alert(self._config, subject, message)
        self._transport.deliver(envelope)
        return AlertResult.delivered()

    def _notify(self, function: str, error: BaseException, message: str) -> None:
        if self._report is not None:
            self._report(function, error, message)
