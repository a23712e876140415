"""API routes."""

from samcut_backend.routes.sessions import router as sessions_router

__all__ = [
    "sessions_router",
]
