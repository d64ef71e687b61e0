"""Session-authenticated dashboard routes (API keys, tenant, logout)."""
import logging
from typing import Optional

from fastapi import APIRouter, Query, Response, status
from fastapi.responses import JSONResponse

from ..asp import (
    SESSION_COOKIE_NAME,
    AspClientError,
    InternalApiClient,
    MissingConfigError,
)
from ..asp.key_resolver import find_latest_api_key
from ..schemas.api_keys import (
    CreateApiKeyRequest,
    RemoveApiKeyRequest,
    StoreApiKeyRequest,
)
from ..config import get_core_base_url
from .dependencies import (
    ApiKeyCacheDep,
    DashboardClientDep,
    HttpSessionDep,
    InternalClientDep,
    SessionCookieDep,
    TimeoutDep,
)
from .errors import error_response, error_status


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/internal", tags=["internal"])

DEFAULT_KEY_NAME = "Dashboard key"


@router.get("/api-keys", summary="List the tenant's API keys")
async def list_api_keys(client: InternalClientDep):
    try:
        return await client.list_api_keys_json()
    except AspClientError as exc:
        logger.error("Failed to list API keys: %s", exc)
        return error_response(exc, "FETCH_API_KEYS_FAILED")


@router.post("/api-keys", summary="Create an API key")
async def create_api_key(
    client: InternalClientDep,
    cache: ApiKeyCacheDep,
    payload: Optional[CreateApiKeyRequest] = None,
):
    """Create a key upstream and cache its full secret.

    The secret is only revealed in this response, so it is stored before
    being returned to the browser.
    """
    payload = payload or CreateApiKeyRequest()
    try:
        created = await client.create_api_key(
            display_name=payload.display_name or DEFAULT_KEY_NAME,
            scopes=payload.scopes,
            sandbox=payload.sandbox,
        )
    except AspClientError as exc:
        logger.error("Failed to create API key: %s", exc)
        return error_response(exc, "CREATE_API_KEY_FAILED")

    await cache.store(created.id, created.prefix, created.api_key)
    logger.info("Created API key id=%s prefix=%s", created.id, created.prefix)
    return created.model_dump(by_alias=True)


@router.delete("/api-keys/{key_id}", summary="Revoke an API key")
async def delete_api_key(
    key_id: str,
    client: InternalClientDep,
    cache: ApiKeyCacheDep,
    prefix: Optional[str] = Query(None),
):
    try:
        result = await client.delete_api_key(key_id)
    except AspClientError as exc:
        logger.error("Failed to delete API key %s: %s", key_id, exc)
        return error_response(exc, "DELETE_API_KEY_FAILED")

    await cache.remove(key_id, prefix)
    return result or {"success": True}


@router.post("/store-api-key", summary="Cache a full API key")
async def store_api_key(payload: StoreApiKeyRequest, cache: ApiKeyCacheDep):
    if not (payload.id and payload.prefix and payload.api_key):
        return JSONResponse(
            {"error": "Missing required fields: id, prefix, apiKey"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    await cache.store(payload.id, payload.prefix, payload.api_key)
    return {"success": True}


@router.delete("/store-api-key", summary="Remove a cached API key")
async def remove_stored_api_key(payload: RemoveApiKeyRequest, cache: ApiKeyCacheDep):
    if not (payload.id and payload.prefix):
        return JSONResponse(
            {"error": "Missing required fields: id, prefix"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    await cache.remove(payload.id, payload.prefix)
    return {"success": True}


@router.get("/latest-api-key", summary="Latest API key with its cached secret")
async def latest_api_key(
    session_cookie: SessionCookieDep,
    http_session: HttpSessionDep,
    cache: ApiKeyCacheDep,
    timeout: TimeoutDep,
):
    try:
        base_url = get_core_base_url()
    except MissingConfigError:
        return JSONResponse(
            {"error": "Backend URL not configured"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if not session_cookie:
        return JSONResponse(
            {"error": "Not authenticated"}, status_code=status.HTTP_401_UNAUTHORIZED
        )

    client = InternalApiClient(
        base_url=base_url,
        session_cookie=session_cookie,
        session=http_session,
        timeout=timeout,
    )
    try:
        latest = await find_latest_api_key(client, cache)
    except AspClientError as exc:
        logger.error("Failed to fetch API keys: %s", exc)
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            return JSONResponse({"error": "Not authenticated"}, status_code=exc.status_code)
        return JSONResponse(
            {"error": "Failed to fetch API keys"}, status_code=error_status(exc)
        )

    if latest is None:
        return JSONResponse({"error": "no_keys"}, status_code=status.HTTP_404_NOT_FOUND)
    return latest.model_dump(by_alias=True, mode="json")


@router.get("/tenant", summary="Current tenant")
async def get_tenant(session_cookie: SessionCookieDep, client: DashboardClientDep):
    tenant = await client.fetch_tenant(session_cookie)
    if tenant is None:
        return JSONResponse(
            {"error": "Not authenticated"}, status_code=status.HTTP_401_UNAUTHORIZED
        )
    return tenant.model_dump(by_alias=True, mode="json")


@router.post("/logout", summary="Log out and clear the session cookie")
async def logout(
    response: Response,
    session_cookie: SessionCookieDep,
    client: DashboardClientDep,
):
    try:
        await client.logout(session_cookie)
    except AspClientError as exc:
        logger.warning("Upstream logout failed, clearing cookie anyway: %s", exc)

    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"success": True}
