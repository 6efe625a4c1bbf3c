from __future__ import annotations

"""
Configuration Domain Management.

Defines the immutable configuration objects consumed by the logger handle
(email alert settings, retention policy and the aggregated settings record),
the default values, and the JSON loader with schema validation and type
coercion used by the CLI and by ``tracelog.start_from_settings``.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from tracelog.domain.constants import (
    DEFAULT_DAYS_TO_KEEP,
    DEFAULT_EMAIL_TEMPLATE,
    DEFAULT_SMTP_PORT,
    DEFAULT_SMTP_TIMEOUT,
)
from tracelog.domain.exceptions import ConfigurationError
from tracelog.domain.levels import LogLevelMask, parse_level_mask

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
PASSWORD_ENV_VAR = "TRACELOG_SMTP_PASSWORD"
TRANSPORT_SMTP = "smtp"
TRANSPORT_HTTP = "http"
SUPPORTED_TRANSPORTS = (TRANSPORT_SMTP, TRANSPORT_HTTP)


# -----------------------------------------------------------------------------
# Configuration Models
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EmailConfig:
    """
    Mail settings used by the alert forwarder.

    Attributes:
        host: SMTP server host name.
        port: SMTP server port.
        username: Account used to authenticate; also the sender address.
        password: Account password.
        to: Recipient addresses.
        template: string.Template text with $From, $To, $Subject and $Message.
        use_tls: Upgrade the SMTP session with STARTTLS when offered.
        timeout: Socket timeout in seconds for the transport.
    """
    host: str
    port: int
    username: str
    password: str
    to: Tuple[str, ...]
    template: str = DEFAULT_EMAIL_TEMPLATE
    use_tls: bool = True
    timeout: float = DEFAULT_SMTP_TIMEOUT

    @property
    def sender(self) -> str:
        return self.username


@dataclass(frozen=True)
class RetentionPolicy:
    """Base directory holding dated log folders and how many days to keep."""
    base_dir: str
    days_to_keep: int = DEFAULT_DAYS_TO_KEEP


@dataclass(frozen=True)
class TracelogSettings:
    """
    Complete, validated settings for one logger handle.

    Attributes:
        level: Active level mask.
        log_dir: Base directory for file logging; None keeps logging console-only.
        days_to_keep: Retention window applied at file-mode start.
        max_bytes: Rollover threshold of the log file (0 disables rotation).
        backup_count: Number of rotated segments to keep.
        email: Optional alert mail settings.
        transport: Transport kind used for alerts ('smtp' or 'http').
        relay_url: Endpoint of the HTTP mail relay when transport is 'http'.
    """
    level: LogLevelMask = LogLevelMask.INFO
    log_dir: Optional[str] = None
    days_to_keep: int = DEFAULT_DAYS_TO_KEEP
    max_bytes: int = 0
    backup_count: int = 0
    email: Optional[EmailConfig] = None
    transport: str = TRANSPORT_SMTP
    relay_url: Optional[str] = None

    @property
    def retention(self) -> Optional[RetentionPolicy]:
        if not self.log_dir:
            return None
        return RetentionPolicy(self.log_dir, self.days_to_keep)


def get_default_settings() -> Dict[str, Any]:
    """
    Generate the default settings dictionary.

    Returns:
        Dict[str, Any]: Default values for every recognised key.
    """
    return {
        "level": "INFO",
        "log_dir": None,
        "days_to_keep": DEFAULT_DAYS_TO_KEEP,
        "max_bytes": 0,
        "backup_count": 0,
        "email": None,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_settings(path: Optional[str] = None, *, strict: bool = False) -> TracelogSettings:
    """
    Load settings from a JSON file and validate them.

    A missing path yields the defaults. The SMTP password may be supplied
    through the TRACELOG_SMTP_PASSWORD environment variable.

    Args:
        path: Location of the JSON settings file.
        strict: Raise instead of coercing malformed values.

    Returns:
        TracelogSettings: The validated settings.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    raw: Dict[str, Any] = {}

    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load settings from '{path}': {e}") from e
        logger.debug(f"Settings loaded from {path}")

    settings, warnings = validate_settings(raw, strict=strict)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")
    return settings


def settings_to_dict(settings: TracelogSettings) -> Dict[str, Any]:
    """Serialize settings for display, masking the SMTP password."""
    email: Optional[Dict[str, Any]] = None
    if settings.email is not None:
        email = {
            "host": settings.email.host,
            "port": settings.email.port,
            "username": settings.email.username,
            "password": "***" if settings.email.password else "",
            "to": list(settings.email.to),
            "use_tls": settings.email.use_tls,
            "timeout": settings.email.timeout,
            "transport": settings.transport,
            "relay_url": settings.relay_url,
        }

    return {
        "level": settings.level.value,
        "log_dir": settings.log_dir,
        "days_to_keep": settings.days_to_keep,
        "max_bytes": settings.max_bytes,
        "backup_count": settings.backup_count,
        "email": email,
    }


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

def validate_settings(raw: Any, *, strict: bool = False) -> Tuple[TracelogSettings, List[str]]:
    """
    Validate and normalize a raw settings dictionary.

    Args:
        raw: Settings data, usually decoded JSON.
        strict: If True, raise ConfigurationError instead of coercing.

    Returns:
        Tuple[TracelogSettings, List[str]]: Settings and the collected warnings.
    """
    warnings: List[str] = []
    defaults = get_default_settings()

    if not isinstance(raw, dict):
        msg = f"Invalid settings type: expected dict, received {type(raw).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using defaults.")
        raw = {}

    merged: Dict[str, Any] = dict(defaults)
    merged.update(raw)

    raw_level = merged.get("level")
    if raw_level is None:
        raw_level = defaults["level"]
    try:
        level = parse_level_mask(raw_level)
    except ConfigurationError as e:
        if strict:
            raise
        warnings.append(f"{e} Using fallback.")
        level = parse_level_mask(defaults["level"])

    log_dir = _as_optional_str(merged.get("log_dir"), "log_dir", warnings, strict)
    days_to_keep = _as_int(merged.get("days_to_keep"), defaults["days_to_keep"], "days_to_keep", warnings, strict)
    max_bytes = _as_int(merged.get("max_bytes"), defaults["max_bytes"], "max_bytes", warnings, strict)
    backup_count = _as_int(merged.get("backup_count"), defaults["backup_count"], "backup_count", warnings, strict)

    email, transport, relay_url = _build_email(merged.get("email"), warnings, strict)

    settings = TracelogSettings(
        level=level,
        log_dir=log_dir,
        days_to_keep=days_to_keep,
        max_bytes=max_bytes,
        backup_count=backup_count,
        email=email,
        transport=transport,
        relay_url=relay_url,
    )
    return settings, warnings


def _build_email(
        value: Any,
        warnings: List[str],
        strict: bool,
) -> Tuple[Optional[EmailConfig], str, Optional[str]]:
    """Translate the optional 'email' section into an EmailConfig."""
    if value is None:
        return None, TRANSPORT_SMTP, None

    if not isinstance(value, dict):
        msg = f"Invalid field 'email': expected dict, received {type(value).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Email alerts disabled.")
        return None, TRANSPORT_SMTP, None

    transport = _as_str(value.get("transport"), TRANSPORT_SMTP, "email.transport", warnings, strict).lower()
    if transport not in SUPPORTED_TRANSPORTS:
        msg = f"Unsupported transport '{transport}'."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using '{TRANSPORT_SMTP}'.")
        transport = TRANSPORT_SMTP

    relay_url = _as_optional_str(value.get("relay_url"), "email.relay_url", warnings, strict)
    host = _as_str(value.get("host"), "", "email.host", warnings, strict)
    recipients = _as_list_str(value.get("to"), "email.to", warnings, strict)

    missing: List[str] = []
    if transport == TRANSPORT_SMTP and not host:
        missing.append("host")
    if transport == TRANSPORT_HTTP and not relay_url:
        missing.append("relay_url")
    if not recipients:
        missing.append("to")
    if missing:
        msg = f"Email section is missing required keys: {', '.join(missing)}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Email alerts disabled.")
        return None, transport, relay_url

    password = _as_str(value.get("password"), "", "email.password", warnings, strict)
    if not password:
        password = os.environ.get(PASSWORD_ENV_VAR, "")

    email = EmailConfig(
        host=host,
        port=_as_int(value.get("port"), DEFAULT_SMTP_PORT, "email.port", warnings, strict),
        username=_as_str(value.get("username"), "", "email.username", warnings, strict),
        password=password,
        to=tuple(recipients),
        template=_as_str(value.get("template"), DEFAULT_EMAIL_TEMPLATE, "email.template", warnings, strict),
        use_tls=_as_bool(value.get("use_tls"), True, "email.use_tls", warnings, strict),
        timeout=float(_as_int(value.get("timeout"), DEFAULT_SMTP_TIMEOUT, "email.timeout", warnings, strict)),
    )
    return email, transport, relay_url


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_optional_str(value: Any, field: str, warnings: List[str], strict: bool) -> Optional[str]:
    """Like _as_str, but empty values collapse to None."""
    v = _as_str(value, "", field, warnings, strict)
    return v or None


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce numeric inputs into non-negative integers."""
    if value is None:
        return fallback

    out: Optional[int] = None
    if isinstance(value, int) and not isinstance(value, bool):
        out = value
    elif isinstance(value, str) and not strict:
        s = value.strip()
        if s.isdigit():
            warnings.append(f"Field '{field}' converted from '{value}' to int.")
            out = int(s)

    if out is not None and out >= 0:
        return out

    msg = f"Invalid field '{field}': expected non-negative int, received {value!r}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict and isinstance(value, str):
        s = value.strip().lower()
        if s in ("true", "1", "yes", "y"):
            warnings.append(f"Field '{field}' converted from '{value}' to True.")
            return True
        if s in ("false", "0", "no", "n"):
            warnings.append(f"Field '{field}' converted from '{value}' to False.")
            return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return []

    if isinstance(value, str) and not strict:
        return [x.strip() for x in value.split(",") if x.strip()]

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str) and item.strip():
                out.append(item.strip())
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise ConfigurationError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return []
