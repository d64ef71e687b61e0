"""Custom exceptions for ASP Platform clients."""
from typing import Any, Optional


class AspClientError(Exception):
    """Base exception for all ASP Platform client errors."""

    status_code = 500
    code = "ASP_CLIENT_ERROR"


class AspApiError(AspClientError):
    """Raised when the upstream API answers with a non-2xx status."""

    code = "ASP_API_ERROR"

    def __init__(self, status: int, reason: Optional[str] = None, data: Any = None):
        self.status_code = status
        self.reason = reason
        self.data = data
        super().__init__(f"ASP API request failed: HTTP {status} {reason or ''}".rstrip())


class AspResponseParseError(AspClientError):
    """Raised when a successful-looking response body is not valid JSON."""

    code = "PARSE_ERROR"

    def __init__(self, status: int, body: str):
        self.status_code = status
        self.body = body
        super().__init__(f"Failed to parse response: HTTP {status}, body={body[:200]}")


class AspConnectionError(AspClientError):
    """Raised for network failures and timeouts talking to the upstream."""

    status_code = 502
    code = "UPSTREAM_UNAVAILABLE"


class InternalApiError(AspClientError):
    """Raised when an asp-core internal endpoint rejects a request."""

    code = "INTERNAL_API_ERROR"

    def __init__(self, status: int, message: str):
        self.status_code = status
        super().__init__(message)


class NotAuthenticatedError(AspClientError):
    """Raised when a session-only operation is attempted without a session."""

    status_code = 401
    code = "NOT_AUTHENTICATED"


class MissingConfigError(AspClientError):
    """Raised when a required environment variable is not set."""

    code = "CONFIGURATION_ERROR"


class MissingApiKeyError(AspClientError):
    """Raised when no API key can be resolved for a public API call."""

    code = "MISSING_API_KEY"
