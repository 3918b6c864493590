"""API routes."""

from .pages import router as pages_router, project_router as project_pages_router
from .versions import router as versions_router

__all__ = [
    "pages_router",
    "project_pages_router",
    "versions_router",
]
