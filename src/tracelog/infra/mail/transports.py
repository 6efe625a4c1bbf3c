from __future__ import annotations

"""
Mail Transport Infrastructure.

Implements the delivery side of alert forwarding. A transport receives a
rendered AlertEnvelope and either hands it off or raises AlertDeliveryError;
protocol-specific exceptions never leave this module.
"""

import logging
import smtplib
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from tracelog.domain.config import TRANSPORT_HTTP, TRANSPORT_SMTP, EmailConfig
from tracelog.domain.constants import DEFAULT_SMTP_TIMEOUT
from tracelog.domain.exceptions import AlertDeliveryError, ConfigurationError
from tracelog.domain.models import AlertEnvelope

logger = logging.getLogger(__name__)

USER_AGENT = "tracelog-alerts/1.0"


class MailTransport(ABC):
    """Delivery mechanism for rendered alerts."""

    @abstractmethod
    def deliver(self, envelope: AlertEnvelope) -> None:
        """
        Hand the envelope off for delivery.

        Raises:
            AlertDeliveryError: If the message could not be handed off.
        """


class SmtpTransport(MailTransport):
    """
    Send alerts through an SMTP server.

    The session is upgraded with STARTTLS when the server offers it and
    use_tls is set; credentials are only sent when both are present.
    """

    def __init__(self, config: EmailConfig) -> None:
        self.config = config

    def deliver(self, envelope: AlertEnvelope) -> None:
        cfg = self.config
        try:
            with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout) as server:
                server.ehlo()
                if cfg.use_tls and server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
                if cfg.username and cfg.password:
                    server.login(cfg.username, cfg.password)
                server.sendmail(
                    envelope.sender,
                    list(envelope.recipients),
                    envelope.body.encode("utf-8"),
                )
        except (smtplib.SMTPException, OSError) as e:
            raise AlertDeliveryError(f"SMTP delivery to {cfg.host}:{cfg.port} failed: {e}") from e

        logger.debug(f"Alert sent via SMTP to {', '.join(envelope.recipients)}: {envelope.subject}")


class HttpRelayTransport(MailTransport):
    """
    Post alerts as JSON to an HTTP mail relay.

    Payload keys: from, to, subject, body.
    """

    def __init__(self, url: str, timeout: float = DEFAULT_SMTP_TIMEOUT, token: Optional[str] = None) -> None:
        self.url = url
        self.timeout = timeout
        self.token = token

    def deliver(self, envelope: AlertEnvelope) -> None:
        payload: Dict[str, Any] = {
            "from": envelope.sender,
            "to": list(envelope.recipients),
            "subject": envelope.subject,
            "body": envelope.body,
        }
        headers = {"User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise AlertDeliveryError(f"Mail relay timed out after {self.timeout}s.") from e
        except requests.exceptions.RequestException as e:
            raise AlertDeliveryError(f"Mail relay communication error: {e}") from e

        if response.status_code not in (200, 201, 202):
            raise AlertDeliveryError(f"Mail relay rejected the alert (HTTP {response.status_code}).")

        logger.debug(f"Alert posted to relay {self.url}: {envelope.subject}")


def build_transport(kind: str, config: EmailConfig, relay_url: Optional[str] = None) -> MailTransport:
    """
    Create the transport named by kind.

    Raises:
        ConfigurationError: If the kind is unknown or the relay URL is missing.
    """
    if kind == TRANSPORT_SMTP:
        return SmtpTransport(config)
    if kind == TRANSPORT_HTTP:
        if not relay_url:
            raise ConfigurationError("The http transport requires a relay_url.")
        return HttpRelayTransport(relay_url, timeout=config.timeout, token=config.password or None)
    raise ConfigurationError(f"Unsupported transport '{kind}'.")
