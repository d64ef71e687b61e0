"""FastAPI authentication dependencies for dashboard routes."""
from typing import Annotated, Optional

from fastapi import Security
from fastapi.security import APIKeyCookie

from ..asp import SESSION_COOKIE_NAME, NotAuthenticatedError


# asp_session is set by asp-core after the OAuth login completes
session_cookie_scheme = APIKeyCookie(name=SESSION_COOKIE_NAME, auto_error=False)


async def get_session_cookie(
    session_cookie: Annotated[Optional[str], Security(session_cookie_scheme)] = None,
) -> Optional[str]:
    """Return the asp_session cookie value, or None when absent or empty."""
    return session_cookie or None


async def require_session(
    session_cookie: Annotated[Optional[str], Security(session_cookie_scheme)] = None,
) -> str:
    """Require the asp_session cookie.

    Raises:
        NotAuthenticatedError: 401 if the cookie is missing
    """
    if not session_cookie:
        raise NotAuthenticatedError("Not authenticated")
    return session_cookie
