from __future__ import annotations

"""
Mail Delivery Infrastructure.

Facade over the concrete alert transports.
"""

from tracelog.infra.mail.transports import (
    HttpRelayTransport,
    MailTransport,
    SmtpTransport,
    build_transport,
)

__all__ = [
    "MailTransport",
    "SmtpTransport",
    "HttpRelayTransport",
    "build_transport",
]
