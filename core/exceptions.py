"""Custom exceptions for the Flattrade proxy."""

from __future__ import annotations

from typing import Any, Optional


class ProxyAppError(Exception):
    """Base exception for all proxy errors."""


class DataSourceError(ProxyAppError):
    """A reference dataset is missing, unreadable or could not be parsed."""


class ExpiryParseError(ProxyAppError):
    """An expiry string does not match the expected DD-Mon-YYYY format."""


class UnknownSegmentError(ProxyAppError):
    """No reference dataset is registered for the requested exchange segment."""


class ConfigurationError(ProxyAppError):
    """Missing or invalid configuration (e.g. API key/secret not set)."""


class BrokerRequestError(ProxyAppError):
    """A forwarded call to the Flattrade API failed."""

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status  = status
        self.details = details if details is not None else message
