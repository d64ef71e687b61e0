"""Async client for asp-core INTERNAL endpoints (session-cookie authenticated)."""
import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp
from pydantic import ValidationError

from ..schemas.api_keys import (
    DEFAULT_SCOPES,
    CreateApiKeyResponse,
    InternalApiKey,
)
from .exceptions import (
    AspConnectionError,
    AspResponseParseError,
    InternalApiError,
    NotAuthenticatedError,
)


SESSION_COOKIE_NAME = "asp_session"


class InternalApiClient:
    """Forwards the tenant's asp_session cookie to /internal/* endpoints."""

    def __init__(
        self,
        base_url: str,
        session_cookie: Optional[str],
        session: aiohttp.ClientSession,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._session_cookie = session_cookie
        self.session = session
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    async def list_api_keys_json(self) -> list:
        """Key listing exactly as asp-core returned it."""
        data = await self._request("GET", "/internal/api-keys")
        return data or []

    async def list_api_keys(self) -> list[InternalApiKey]:
        """List the tenant's API keys (prefixes only, never full secrets).

        Raises:
            AspResponseParseError: If an entry does not match InternalApiKey
        """
        data = await self.list_api_keys_json()
        if not isinstance(data, list):
            raise AspResponseParseError(200, f"expected a list, got {type(data).__name__}")
        try:
            return [InternalApiKey.model_validate(item) for item in data]
        except ValidationError as e:
            raise AspResponseParseError(200, _invalid_fields(e)) from e

    async def create_api_key(
        self,
        display_name: str,
        scopes: Optional[list[str]] = None,
        sandbox: bool = False,
    ) -> CreateApiKeyResponse:
        """Create an API key.

        Args:
            display_name: Human-readable name for the key
            scopes: Permission scopes (defaults to ingestions:write, accounts:read)
            sandbox: Whether this is a sandbox key

        Returns:
            CreateApiKeyResponse carrying the full key (revealed only once)
        """
        body = {
            "displayName": display_name,
            "scopes": scopes if scopes is not None else list(DEFAULT_SCOPES),
            "sandbox": sandbox,
        }
        data = await self._request("POST", "/internal/api-keys", json_body=body)
        try:
            return CreateApiKeyResponse.model_validate(data)
        except ValidationError as e:
            raise AspResponseParseError(200, _invalid_fields(e)) from e

    async def delete_api_key(self, key_id: str) -> dict:
        return await self._request("DELETE", f"/internal/api-keys/{key_id}")

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_body: Optional[dict] = None,
    ) -> Any:
        if not self._session_cookie:
            raise NotAuthenticatedError(
                "No session cookie found. User must be authenticated."
            )

        url = f"{self.base_url}{endpoint}"
        kwargs: dict[str, Any] = {
            "headers": {"Cookie": f"{SESSION_COOKIE_NAME}={self._session_cookie}"},
        }
        if json_body is not None:
            kwargs["json"] = json_body
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            async with self.session.request(method, url, **kwargs) as resp:
                text = await resp.text()

                if not 200 <= resp.status < 300:
                    message = self._error_message(resp.status, resp.reason, text)
                    self.logger.warning(
                        "Internal API %s %s failed: status=%s, message=%s",
                        method,
                        endpoint,
                        resp.status,
                        message,
                    )
                    raise InternalApiError(resp.status, message)

                if resp.status == 204 or not text:
                    return {}
                try:
                    return json.loads(text)
                except ValueError as e:
                    raise AspResponseParseError(resp.status, text) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AspConnectionError(f"Network error calling {method} {url}: {e}") from e

    @staticmethod
    def _error_message(status: int, reason: Optional[str], text: str) -> str:
        """Prefer error.message from the envelope, then the reason phrase."""
        try:
            payload = json.loads(text)
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]

        return reason or f"Request failed with status {status}"


def _invalid_fields(error: ValidationError) -> str:
    """Field paths that failed validation; never echoes input values."""
    return "invalid fields: " + ", ".join(
        ".".join(str(part) for part in err["loc"]) for err in error.errors()
    )
