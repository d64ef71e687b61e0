"""Session lookup and the post-login OAuth callback."""
import logging

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from ..asp import AspClientError, DashboardClient
from ..config import get_app_url, get_core_base_url
from .dependencies import HttpSessionDep, SessionCookieDep, TimeoutDep


logger = logging.getLogger(__name__)

router = APIRouter(tags=["session"])


@router.get("/api/auth/session", summary="Current session")
async def get_session(
    session_cookie: SessionCookieDep,
    http_session: HttpSessionDep,
    timeout: TimeoutDep,
):
    """Return the upstream session, or ``{"authenticated": false}``."""
    if not session_cookie:
        return {"authenticated": False}

    client = DashboardClient(
        base_url=get_core_base_url(),
        session=http_session,
        timeout=timeout,
    )
    data = await client.fetch_session_data(session_cookie)
    if data is None:
        return {"authenticated": False}
    return data


@router.get("/auth/callback", summary="OAuth callback", response_class=RedirectResponse)
async def auth_callback(
    session_cookie: SessionCookieDep,
    http_session: HttpSessionDep,
    timeout: TimeoutDep,
):
    """Called after login; asp-core has already set the asp_session cookie."""
    app_url = get_app_url()
    try:
        client = DashboardClient(
            base_url=get_core_base_url(),
            session=http_session,
            timeout=timeout,
        )
        info = await client.fetch_session(session_cookie)
    except AspClientError as e:
        logger.error("Error during auth callback: %s", e)
        return RedirectResponse(f"{app_url}/login?error=session", status_code=307)

    if info.authenticated:
        return RedirectResponse(f"{app_url}/dashboard", status_code=307)
    return RedirectResponse(f"{app_url}/login?error=session", status_code=307)
