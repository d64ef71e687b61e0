"""HTTP routers for the developer dashboard backend."""
from .internal import router as internal_router
from .public import router as public_router
from .session import router as session_router

__all__ = ["public_router", "internal_router", "session_router"]
