"""Client side: API client with token refresh and immutable task list state."""

from .api_client import ApiError, SessionExpiredError, TodoApiClient, TokenStore
from .models import Pagination, TagItem, TaskItem, TaskPageResult
from .state import TaskListState, reduce, select_statistics, select_visible_tasks

__all__ = [
    "TodoApiClient",
    "TokenStore",
    "ApiError",
    "SessionExpiredError",
    "TaskItem",
    "TagItem",
    "Pagination",
    "TaskPageResult",
    "TaskListState",
    "reduce",
    "select_visible_tasks",
    "select_statistics",
]
