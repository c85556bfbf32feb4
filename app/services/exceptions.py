# app/services/exceptions.py
"""
Error taxonomy shared by the calendar and reminder engines.

Run-aborting errors (ConfigurationError, FetchError) stop a whole
reconciliation or dispatch run. Everything else is scoped to a single item:
it is recorded in the run's report and the loop moves on.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base exception for service layer failures."""

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(ServiceError):
    """A gateway is not usable (missing credentials, calendar id, ...)."""


class FetchError(ServiceError):
    """Listing remote calendar events failed."""


class PerItemError(ServiceError):
    """A single event or appointment could not be processed."""


class MissingStartTimeError(PerItemError):
    def __init__(self):
        super().__init__("Missing start time")


class InvalidEventTimeError(PerItemError):
    """Start/end could not be parsed, or end precedes start."""


class CalendarGatewayError(ServiceError):
    """A single calendar API call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, *, cause: Optional[Exception] = None):
        super().__init__(message, cause=cause)
        self.status_code = status_code


class RemoteEventNotFoundError(CalendarGatewayError):
    """The remote event no longer exists (HTTP 404 / 410)."""


class NotificationError(PerItemError):
    """Sending a message failed before the provider could answer."""


class ProviderRejection(PerItemError):
    """The messaging provider answered with a non-success status."""

    def __init__(
            self,
            message: str,
            status_code: Optional[int] = None,
            provider_code: Optional[str] = None,
            body: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.provider_code = provider_code
        self.body = body or {}


class JobAlreadyRunningError(ServiceError):
    """Another run of the same scheduled job holds the lock."""
