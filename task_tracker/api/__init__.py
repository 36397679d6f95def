"""API layer - FastAPI endpoints."""

from .auth import router as auth_router
from .tags import router as tags_router
from .tasks import router as tasks_router

__all__ = [
    "auth_router",
    "tasks_router",
    "tags_router",
]
