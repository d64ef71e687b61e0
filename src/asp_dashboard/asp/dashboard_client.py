"""Async client for asp-core auth endpoints used by the dashboard shell."""
import asyncio
import logging
from typing import Any, Optional

import aiohttp
from pydantic import ValidationError

from ..schemas.session import SessionInfo, TenantInfo
from .exceptions import AspApiError, AspConnectionError
from .internal_client import SESSION_COOKIE_NAME


logger = logging.getLogger(__name__)


class DashboardClient:
    """Session lookups, tenant lookups and logout against asp-core.

    Lookups never raise: an unreachable or rejecting backend is reported
    as "not authenticated". Logout does raise, so the caller can tell the
    user the session may still be live.
    """

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout

    def _cookie_headers(self, session_cookie: str) -> dict:
        return {"Cookie": f"{SESSION_COOKIE_NAME}={session_cookie}"}

    async def fetch_session_data(self, session_cookie: Optional[str]) -> Any:
        """GET /auth/session/me, returning the upstream JSON untouched.

        Returns None when there is no cookie, on a non-2xx answer, or on any
        failure.
        """
        if not session_cookie:
            return None

        try:
            async with self.session.get(
                f"{self.base_url}/auth/session/me",
                headers=self._cookie_headers(session_cookie),
                timeout=self.timeout,
            ) as resp:
                if resp.status == 401:
                    return None
                if not 200 <= resp.status < 300:
                    logger.warning(
                        "Session lookup failed: status=%s %s", resp.status, resp.reason
                    )
                    return None
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Failed to fetch session: %s", e)
            return None

    async def fetch_session(self, session_cookie: Optional[str]) -> SessionInfo:
        """Parsed session; unauthenticated on 401 or any failure."""
        data = await self.fetch_session_data(session_cookie)
        if not isinstance(data, dict):
            return SessionInfo(authenticated=False)
        try:
            return SessionInfo.model_validate(data)
        except ValidationError as e:
            logger.warning("Unexpected session payload: %s", e)
            return SessionInfo(authenticated=False)

    async def fetch_tenant(self, session_cookie: Optional[str]) -> Optional[TenantInfo]:
        """GET /internal/tenant/me; None when not authenticated or on failure."""
        if not session_cookie:
            return None

        try:
            async with self.session.get(
                f"{self.base_url}/internal/tenant/me",
                headers=self._cookie_headers(session_cookie),
                timeout=self.timeout,
            ) as resp:
                if resp.status == 401:
                    return None
                if not 200 <= resp.status < 300:
                    logger.warning(
                        "Tenant lookup failed: status=%s %s", resp.status, resp.reason
                    )
                    return None
                data = await resp.json(content_type=None)
                return TenantInfo.model_validate(data)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Failed to fetch tenant: %s", e)
            return None

    async def logout(self, session_cookie: Optional[str]) -> None:
        """POST /auth/logout, invalidating the session upstream.

        Raises:
            AspApiError: Upstream rejected the logout
            AspConnectionError: Network error or timeout
        """
        headers = self._cookie_headers(session_cookie) if session_cookie else {}
        try:
            async with self.session.post(
                f"{self.base_url}/auth/logout",
                headers=headers,
                timeout=self.timeout,
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise AspApiError(resp.status, resp.reason)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Failed to logout: %s", e)
            raise AspConnectionError(f"Network error during logout: {e}") from e
