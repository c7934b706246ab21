"""Custom exception classes for the application."""
from typing import Any, List, Optional


class AppException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, detail: Any = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class SourceUnavailable(AppException):
    """A listing source could not be fetched.

    Raised by a single collector with ``source`` set to its provenance, and
    by the aggregator with ``source=None`` and every per-source failure in
    ``failures``. Retryable from the caller's side.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        failures: Optional[List["SourceUnavailable"]] = None,
        detail: Any = None,
    ):
        self.source = source
        self.failures = failures or []
        super().__init__(message, detail)


class ConfigurationError(AppException):
    """Caller bug: unsupported currency, malformed filter or page request."""
    pass
