"""API routers for episode-sync."""

from .series import router as series_router
from .queue import router as queue_router
from .import_lists import router as import_lists_router

__all__ = ["series_router", "queue_router", "import_lists_router"]
