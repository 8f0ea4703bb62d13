"""Repository layer for data access."""

from .base import BaseRepository
from .category import CategoryRepository
from .tag import TagRepository
from .task import TaskRepository
from .user import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "TaskRepository",
    "CategoryRepository",
    "TagRepository",
]
