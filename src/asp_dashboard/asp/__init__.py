"""ASP Platform integration modules."""
from .dashboard_client import DashboardClient
from .exceptions import (
    AspApiError,
    AspClientError,
    AspConnectionError,
    AspResponseParseError,
    InternalApiError,
    MissingApiKeyError,
    MissingConfigError,
    NotAuthenticatedError,
)
from .internal_client import SESSION_COOKIE_NAME, InternalApiClient
from .server_client import AspServerClient, mask_key

__all__ = [
    "AspServerClient",
    "InternalApiClient",
    "DashboardClient",
    "SESSION_COOKIE_NAME",
    "mask_key",
    "AspClientError",
    "AspApiError",
    "AspConnectionError",
    "AspResponseParseError",
    "InternalApiError",
    "MissingApiKeyError",
    "MissingConfigError",
    "NotAuthenticatedError",
]
