"""Exception hierarchy for the dogclient package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dogclient.ratelimit import RateLimit


class DatadogError(Exception):
    """Base exception for all errors raised by the client."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def with_message(self, message: str) -> DatadogError:
        """Return a copy of this error (same type and attributes) with *message*."""
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.args = (message,)
        clone.message = message
        return clone


class BuildError(DatadogError):
    """The request could not be constructed (bad URL, unserializable body)."""


class TransportError(DatadogError):
    """No response was received from the API."""


class RequestCancelledError(DatadogError):
    """The request's deadline expired or it was cancelled."""


class DecodeError(DatadogError):
    """The response body could not be decoded."""


class ApplicationError(DatadogError):
    """The API answered with a success status but reported an error in the body."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API returned error: {detail}")


class RedactedError(DatadogError):
    """Stands in for a foreign exception whose message contained credentials."""

    def __init__(self, message: str, original_type: str) -> None:
        self.original_type = original_type
        super().__init__(message)


class APIError(DatadogError):
    """Raised for any non-2xx HTTP response."""

    def __init__(
        self,
        status_code: int,
        message: str,
        body: str = "",
        rate_limit: RateLimit | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.rate_limit = rate_limit
        super().__init__(message)


class ClientError(APIError):
    """Raised on 4xx responses."""


class AuthenticationError(ClientError):
    """Raised on 401 or 403 responses."""


class NotFoundError(ClientError):
    """Raised on 404 responses."""


class ValidationError(ClientError):
    """Raised on 400 or 422 responses."""


class RateLimitError(ClientError):
    """Raised on 429 responses."""


class ServerError(APIError):
    """Raised on 5xx responses."""


class UnexpectedStatusError(APIError):
    """Raised on informational or redirect responses."""


# Maps HTTP status codes to exception classes.
_STATUS_MAP: dict[int, type[APIError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    422: ValidationError,
    429: RateLimitError,
}


def error_for_status(
    status_code: int,
    message: str,
    body: str = "",
    rate_limit: RateLimit | None = None,
) -> APIError:
    """Construct the appropriate exception for *status_code*."""
    exc_cls = _STATUS_MAP.get(status_code)
    if exc_cls is None:
        if 400 <= status_code < 500:
            exc_cls = ClientError
        elif status_code >= 500:
            exc_cls = ServerError
        else:
            exc_cls = UnexpectedStatusError
    return exc_cls(status_code, message, body, rate_limit)
