"""
Custom exceptions for the WEBSERVICES client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wwsvc.common.models import ComResult


class WebwareError(Exception):
    """Base exception for all client failures."""

    retryable: bool = False


class ConfigurationError(WebwareError, ValueError):
    """Exception for malformed or incomplete client configuration."""


class SessionStateError(WebwareError):
    """Exception for operations attempted in the wrong session state."""

    def __init__(self, message: str, state: str, operation: str) -> None:
        super().__init__(message)
        self.state = state
        self.operation = operation


class TransportError(WebwareError):
    """Exception for network, TLS and timeout failures."""

    retryable = True


class TransportTimeoutError(TransportError):
    """Exception for requests that exceeded their timeout."""


class HttpStatusError(TransportError):
    """Exception for HTTP error responses that carry no COMRESULT."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class SerializationError(WebwareError):
    """Exception for unserializable parameters or undecodable responses."""


class ApiError(WebwareError):
    """Exception for calls the server accepted but rejected in COMRESULT."""

    def __init__(
        self,
        message: str,
        code: int,
        errno: str | None = None,
        com_result: ComResult | None = None,
    ) -> None:
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message
        self.errno = errno
        self.com_result = com_result


class TicketExpiredError(ApiError):
    """Exception for a service pass the server no longer accepts."""
