"""Client-side value types parsed from API responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models import TaskPriority, TaskStatus


class TagItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    color: str = "#6B7280"


class TaskItem(BaseModel):
    """
    Задача в том виде, в каком её отдаёт GET /tasks.

    frozen=True: задачи в состоянии клиента неизменяемы, изменения
    делаются через model_copy(update=...).
    """

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    completed_at: datetime | None = None
    category_id: int | None = None
    tags: tuple[TagItem, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    page: int = 1
    limit: int = 20
    total_pages: int = 0


class TaskPageResult(BaseModel):
    """Ответ GET /tasks."""

    model_config = ConfigDict(frozen=True)

    items: tuple[TaskItem, ...] = Field(default_factory=tuple)
    total: int = 0
    page: int = 1
    limit: int = 20
    total_pages: int = 0

    @property
    def pagination(self) -> Pagination:
        return Pagination(
            total=self.total, page=self.page, limit=self.limit, total_pages=self.total_pages
        )
