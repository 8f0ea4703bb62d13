"""API layer - FastAPI endpoints."""

from .auth import router as auth_router
from .categories import router as categories_router
from .dashboard import router as dashboard_router
from .tags import router as tags_router
from .tasks import router as tasks_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "users_router",
    "tasks_router",
    "categories_router",
    "tags_router",
    "dashboard_router",
]
