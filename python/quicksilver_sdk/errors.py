"""
Location: python/quicksilver_sdk/errors.py

Summary:
    Exception classes for quicksilver-sdk. HTTP failures are raised from
    resource calls; streaming failures are delivered as payloads of the
    "error" event on a StreamConnection and are never raised from its
    callbacks.

Usage:
    from quicksilver_sdk.errors import NotFoundError, QuicksilverError

    try:
        account = await client.accounts.retrieve("acc_missing")
    except NotFoundError:
        ...
"""

from typing import Any, Optional

from .types import APIError


class QuicksilverError(Exception):
    """
    Base exception for all quicksilver-sdk errors.

    Attributes:
        message: Human readable description
        status_code: HTTP status code, when the error came from a response
        details: Optional structured details from the server
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class APIErrorResponse(QuicksilverError):
    """Exception raised when the API returns a structured error body."""

    def __init__(self, api_error: APIError):
        super().__init__(api_error.message, api_error.status_code, api_error.details)
        self.api_error = api_error


class NetworkError(QuicksilverError):
    """Exception raised on connectivity problems and request timeouts."""
    pass


class AuthenticationError(QuicksilverError):
    """Exception raised when the API key is invalid or missing."""

    def __init__(self, message: str = "Invalid or missing API key"):
        super().__init__(message, 401)


class NotFoundError(QuicksilverError):
    """Exception raised when a resource does not exist."""

    def __init__(self, resource: str, id: Optional[str] = None):
        if id:
            message = f"{resource} with ID '{id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(message, 404)


class ValidationError(QuicksilverError):
    """Exception raised when the server rejects a request as invalid."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, 400, details)


class RateLimitError(QuicksilverError):
    """
    Exception raised when the rate limit is exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying, if the server said so
    """

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        details = {"retry_after": retry_after} if retry_after is not None else None
        super().__init__(message, 429, details)
        self.retry_after = retry_after


class ServerError(QuicksilverError):
    """Exception raised on 5xx responses without a structured body."""

    def __init__(self, message: str = "Internal server error", status_code: int = 500):
        super().__init__(message, status_code)


class InvalidStateError(QuicksilverError):
    """Exception raised when an operation is not allowed in the current state."""
    pass


class StreamError(QuicksilverError):
    """Base class for errors delivered on a StreamConnection "error" event."""
    pass


class TransportError(StreamError):
    """The event-stream transport failed or was closed by the server."""
    pass


class StreamParseError(StreamError):
    """
    A named event frame carried a payload that is not valid JSON.

    Attributes:
        event: The event category whose payload failed to parse
        data: The raw payload text
    """

    def __init__(self, event: str, data: str, reason: str):
        super().__init__(f"Failed to parse {event}: {reason}")
        self.event = event
        self.data = data


class ReconnectExhaustedError(StreamError):
    """
    The reconnection budget was used up. The connection stays inert until
    closed.

    Attributes:
        attempts: Number of reconnection attempts that were made
    """

    def __init__(self, attempts: int):
        super().__init__("Max reconnection attempts reached")
        self.attempts = attempts
