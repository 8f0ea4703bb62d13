"""Service layer with business logic."""

from .auth import AuthenticationError, AuthService
from .category import CategoryService
from .dashboard import DashboardService
from .tag import TagService
from .task import ImportResult, TaskPage, TaskService
from .user import UserService

__all__ = [
    "AuthService",
    "AuthenticationError",
    "UserService",
    "TaskService",
    "TaskPage",
    "ImportResult",
    "CategoryService",
    "TagService",
    "DashboardService",
]
