"""ASP developer dashboard FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

import aiohttp
from fastapi import FastAPI

from .api import internal_router, public_router, session_router
from .api.errors import setup_exception_handlers
from .cache import ApiKeyCache
from .config import get_cache_path, get_log_level


# Configure logging
logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared upstream HTTP session and the API key cache."""
    app.state.http_session = aiohttp.ClientSession()
    app.state.api_key_cache = ApiKeyCache(get_cache_path())
    logger.info("API key cache: %s", app.state.api_key_cache.path)
    try:
        yield
    finally:
        await app.state.http_session.close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="ASP Developer Dashboard API",
        version="0.1.0",
        description="Server-side proxy between the ASP dashboard and the ASP Platform",
        lifespan=lifespan,
    )

    setup_exception_handlers(app)

    app.include_router(session_router)
    app.include_router(internal_router)
    app.include_router(public_router)

    return app


app = create_app()
