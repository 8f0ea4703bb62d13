"""SQLAlchemy models for the todo app."""

from .base import Base, TimestampMixin, utc_now
from .category import DEFAULT_CATEGORY_COLOR, Category
from .tag import DEFAULT_TAG_COLOR, Tag
from .task import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    BulkOperation,
    Task,
    TaskPriority,
    TaskStatus,
)
from .task_tag import task_tags
from .user import Theme, User, UserSettings

__all__ = [
    "Base",
    "TimestampMixin",
    "utc_now",
    "User",
    "UserSettings",
    "Theme",
    "Category",
    "DEFAULT_CATEGORY_COLOR",
    "Tag",
    "DEFAULT_TAG_COLOR",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "BulkOperation",
    "TITLE_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "task_tags",
]
