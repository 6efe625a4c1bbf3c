"""
tracelog exception hierarchy.

All tracelog exceptions inherit from TracelogError so that callers can catch
library-level errors while still distinguishing specific failure modes.
"""


class TracelogError(Exception):
    """Base exception class for all tracelog errors."""


class ConfigurationError(TracelogError):
    """Raised for invalid settings or configuration calls made out of order."""


class LogDestinationError(TracelogError):
    """Raised when the log directory or log file cannot be created."""


class AlertDeliveryError(TracelogError):
    """Raised by mail transports when an alert could not be handed off."""
