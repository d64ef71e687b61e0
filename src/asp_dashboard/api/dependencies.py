"""Shared FastAPI dependencies: HTTP session, key cache and upstream clients."""
import logging
from typing import Annotated, Optional

import aiohttp
from fastapi import Depends, Request

from ..asp import (
    AspServerClient,
    DashboardClient,
    InternalApiClient,
    MissingConfigError,
)
from ..asp.key_resolver import resolve_api_key
from ..cache import ApiKeyCache
from ..config import (
    get_api_base_url,
    get_core_base_url,
    get_http_timeout_seconds,
)
from .auth import get_session_cookie, require_session


logger = logging.getLogger(__name__)


def get_http_session(request: Request) -> aiohttp.ClientSession:
    """Shared ClientSession opened in the application lifespan."""
    return request.app.state.http_session


def get_api_key_cache(request: Request) -> ApiKeyCache:
    return request.app.state.api_key_cache


def get_request_timeout() -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(total=get_http_timeout_seconds())


HttpSessionDep = Annotated[aiohttp.ClientSession, Depends(get_http_session)]
ApiKeyCacheDep = Annotated[ApiKeyCache, Depends(get_api_key_cache)]
TimeoutDep = Annotated[aiohttp.ClientTimeout, Depends(get_request_timeout)]
SessionCookieDep = Annotated[Optional[str], Depends(get_session_cookie)]


def get_internal_client(
    session_cookie: Annotated[str, Depends(require_session)],
    http_session: HttpSessionDep,
    timeout: TimeoutDep,
) -> InternalApiClient:
    """Session-authenticated asp-core client; 401 without a session cookie."""
    return InternalApiClient(
        base_url=get_core_base_url(),
        session_cookie=session_cookie,
        session=http_session,
        timeout=timeout,
    )


def get_dashboard_client(
    http_session: HttpSessionDep,
    timeout: TimeoutDep,
) -> DashboardClient:
    return DashboardClient(
        base_url=get_core_base_url(),
        session=http_session,
        timeout=timeout,
    )


async def get_server_client(
    session_cookie: SessionCookieDep,
    http_session: HttpSessionDep,
    cache: ApiKeyCacheDep,
    timeout: TimeoutDep,
) -> AspServerClient:
    """Public API client carrying the tenant's cached key or ASP_API_KEY.

    Raises:
        MissingApiKeyError: If no key can be resolved (500 envelope)
    """
    internal_client = None
    if session_cookie:
        try:
            internal_client = InternalApiClient(
                base_url=get_core_base_url(),
                session_cookie=session_cookie,
                session=http_session,
                timeout=timeout,
            )
        except MissingConfigError as e:
            logger.warning("Skipping cached key lookup: %s", e)

    api_key = await resolve_api_key(internal_client, cache)
    return AspServerClient(
        base_url=get_api_base_url(),
        api_key=api_key,
        session=http_session,
        timeout=timeout,
    )


InternalClientDep = Annotated[InternalApiClient, Depends(get_internal_client)]
DashboardClientDep = Annotated[DashboardClient, Depends(get_dashboard_client)]
ServerClientDep = Annotated[AspServerClient, Depends(get_server_client)]
