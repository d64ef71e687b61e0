"""Async client for the public ASP Platform API (X-Api-Key authenticated)."""
import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from .exceptions import AspApiError, AspConnectionError, AspResponseParseError


def mask_key(key: str) -> str:
    """Mask an API key for logs: first 8 and last 4 characters."""
    if len(key) <= 12:
        return key
    return key[:8] + "…" + key[-4:]


class AspServerClient:
    """Server-side client for /v1 endpoints.

    The API key never leaves the server; browsers only ever talk to the
    dashboard routes that wrap this client.
    """

    EMPTY_BODY_STATUSES = {201, 204}

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        session: aiohttp.ClientSession,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the public API client.

        Args:
            base_url: e.g., "http://localhost:8080/v1"
            api_key: Tenant API key sent as X-Api-Key (never logged in full)
            session: Injected aiohttp ClientSession
            timeout: Optional per-request timeout
            logger: Optional logger instance
        """
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self.session = session
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    async def ping(self) -> dict:
        """Health check; returns {"status": "ok", "tenantId": ...}."""
        return await self.get("/ping")

    async def get_banks(self) -> list:
        return await self.get("/banks")

    async def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        return await self._request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        return await self._request("POST", endpoint, json_body=body, params=params)

    async def post_form_data(
        self,
        endpoint: str,
        form: aiohttp.FormData,
        params: Optional[dict] = None,
    ) -> Any:
        """POST multipart/form-data (the boundary header is set by aiohttp)."""
        return await self._request("POST", endpoint, data=form, params=params)

    async def delete(self, endpoint: str) -> Any:
        return await self._request("DELETE", endpoint)

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_body: Optional[dict] = None,
        data: Optional[aiohttp.FormData] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Execute a request and decode the JSON body.

        Raises:
            AspApiError: Upstream answered with a non-2xx status
            AspResponseParseError: 2xx response whose body is not JSON
            AspConnectionError: Network error or timeout
        """
        url = f"{self.base_url}{endpoint}"
        headers = {}
        if self._api_key:
            headers["X-Api-Key"] = self._api_key
        else:
            self.logger.warning("No API key provided, request to %s may fail", endpoint)

        self.logger.debug(
            "Request: method=%s, url=%s, api_key=%s",
            method,
            url,
            mask_key(self._api_key) if self._api_key else None,
        )

        kwargs: dict[str, Any] = {"headers": headers}
        if json_body is not None:
            kwargs["json"] = json_body
        if data is not None:
            kwargs["data"] = data
        if params:
            kwargs["params"] = params
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            async with self.session.request(method, url, **kwargs) as resp:
                text = await resp.text()
                return self._decode_response(resp.status, resp.reason, text)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AspConnectionError(f"Network error calling {method} {url}: {e}") from e

    @classmethod
    def _decode_response(cls, status: int, reason: Optional[str], text: str) -> Any:
        if status in cls.EMPTY_BODY_STATUSES:
            if not text:
                return {}
            try:
                return json.loads(text)
            except ValueError:
                return {}

        try:
            data = json.loads(text) if text else None
        except ValueError:
            if 200 <= status < 300:
                raise AspResponseParseError(status, text)
            data = None

        if not 200 <= status < 300:
            raise AspApiError(status, reason, data)

        if data is None:
            raise AspResponseParseError(status, text)
        return data
