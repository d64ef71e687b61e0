"""JSON error envelopes for proxy failures.

Upstream JSON error bodies are passed through untouched with the upstream
status. Anything else becomes:

    {"error": "MACHINE_READABLE_CODE", "message": "Human-readable message"}
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..asp import AspClientError


logger = logging.getLogger(__name__)


def error_status(exc: Exception) -> int:
    """HTTP status for a failed proxy call.

    A parse failure keeps the upstream's 2xx status on the exception; the
    browser gets 502 for it instead.
    """
    status_code = getattr(exc, "status_code", None) or 500
    if status_code < 400:
        return 502
    return status_code


def error_response(exc: Exception, code: str) -> JSONResponse:
    """Build the envelope for a failed proxy call.

    Args:
        exc: The caught exception
        code: Route-specific fallback code, e.g. FETCH_ACCOUNTS_FAILED
    """
    data = getattr(exc, "data", None)
    if data is None:
        data = {"error": code, "message": str(exc)}
    return JSONResponse(data, status_code=error_status(exc))


async def asp_client_error_handler(request: Request, exc: AspClientError) -> JSONResponse:
    """Catch-all for client errors raised outside a route's own try block."""
    logger.error(
        "Unhandled %s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc,
    )
    return error_response(exc, exc.code)


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AspClientError, asp_client_error_handler)
