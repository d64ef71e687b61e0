"""Environment-driven configuration.

Values are read on every call so tests and long-running processes pick up
changes to the environment without a restart.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from .asp.exceptions import MissingConfigError


logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8080/v1"
DEFAULT_APP_URL = "http://localhost:7000"
DEFAULT_CACHE_PATH = ".api-keys-cache.json"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


def get_api_base_url() -> str:
    """Base URL of the public ASP Platform API (X-Api-Key authenticated)."""
    return os.getenv("ASP_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")


def get_core_base_url() -> str:
    """Base URL of asp-core for auth and internal (session) endpoints.

    Raises:
        MissingConfigError: If ASP_CORE_BASE_URL is not set
    """
    url = os.getenv("ASP_CORE_BASE_URL")
    if not url:
        raise MissingConfigError(
            "Missing ASP_CORE_BASE_URL environment variable "
            "(e.g., ASP_CORE_BASE_URL=http://localhost:8080)"
        )
    return url.rstrip("/")


def get_app_url() -> str:
    """Public URL of the dashboard itself, used for redirects."""
    return os.getenv("APP_URL", DEFAULT_APP_URL).rstrip("/")


def get_env_api_key() -> Optional[str]:
    return os.getenv("ASP_API_KEY") or None


def get_cache_path() -> Path:
    return Path(os.getenv("API_KEY_CACHE_PATH", DEFAULT_CACHE_PATH))


def get_http_timeout_seconds() -> float:
    value = os.getenv("ASP_HTTP_TIMEOUT_SECONDS")
    if not value:
        return DEFAULT_HTTP_TIMEOUT_SECONDS
    try:
        return float(value)
    except ValueError:
        logger.warning(
            "Invalid ASP_HTTP_TIMEOUT_SECONDS '%s', using %s",
            value,
            DEFAULT_HTTP_TIMEOUT_SECONDS,
        )
        return DEFAULT_HTTP_TIMEOUT_SECONDS


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
