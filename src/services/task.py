"""Task service with business logic."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    BulkOperation,
    Task,
    TaskPriority,
    TaskStatus,
    utc_now,
)
from ..query import SortOption, TaskFilters, filter_tasks, sort_tasks
from ..query.dates import as_naive_utc, resolve_zone
from ..repositories import CategoryRepository, TagRepository, TaskRepository, UserRepository
from .tag import clean_tag_names

logger = get_logger(__name__)

TASK_FIELDS = frozenset(
    {"title", "description", "priority", "status", "due_date", "category_id", "tags"}
)


@dataclass(frozen=True)
class TaskPage:
    """Одна страница отфильтрованного и отсортированного списка задач."""

    items: list[Task]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


@dataclass(frozen=True)
class ImportItemError:
    index: int
    message: str


@dataclass
class ImportResult:
    imported: list[Task] = field(default_factory=list)
    errors: list[ImportItemError] = field(default_factory=list)


def apply_status(task: Task, status: TaskStatus, now: datetime | None = None) -> None:
    """
    Сменить статус, поддерживая инвариант completed_at <=> COMPLETED.

    Повторное завершение уже завершённой задачи не сдвигает completed_at.
    """
    if status == TaskStatus.COMPLETED:
        if task.status != TaskStatus.COMPLETED or task.completed_at is None:
            task.completed_at = now or utc_now()
    else:
        task.completed_at = None
    task.status = status


class TaskService:
    """
    Сервис для работы с задачами.

    Задача принадлежит ровно одному пользователю, поэтому user_id -
    первый аргумент каждого метода. Чужая задача неотличима от
    несуществующей ("not found").

    Удаление мягкое: status = deleted. Такие задачи исчезают из всех
    выборок, но остаются в БД.
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса с несколькими репозиториями."""
        self.db = db
        self.task_repo = TaskRepository(db)
        self.category_repo = CategoryRepository(db)
        self.tag_repo = TagRepository(db)
        self.user_repo = UserRepository(db)

    # ========================================================================
    # ВАЛИДАЦИЯ
    # ========================================================================

    def _clean_title(self, title: str | None) -> str:
        if not title or not title.strip():
            raise ValueError("Task title cannot be empty")
        title = title.strip()
        if len(title) > TITLE_MAX_LENGTH:
            raise ValueError(f"Task title must not exceed {TITLE_MAX_LENGTH} characters")
        return title

    def _clean_description(self, description: str | None) -> str | None:
        if description is None or not description.strip():
            return None
        if len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Task description must not exceed {DESCRIPTION_MAX_LENGTH} characters"
            )
        return description.strip()

    async def _check_category(self, user_id: int, category_id: int | None) -> int | None:
        if category_id is None:
            return None
        if not await self.category_repo.get_owned(category_id, user_id):
            raise ValueError(f"Category with id {category_id} not found")
        return category_id

    # ========================================================================
    # CRUD
    # ========================================================================

    async def create_task(
        self,
        user_id: int,
        title: str,
        description: str | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: datetime | None = None,
        category_id: int | None = None,
        tag_names: list[str] | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        allow_past_due_date: bool = False,
    ) -> Task:
        """
        Создать задачу.

        Args:
            user_id: Владелец
            title: Название (обязательно, до 100 символов)
            description: Описание (до 500 символов)
            priority: Приоритет
            due_date: Дедлайн
            category_id: Категория пользователя
            tag_names: Имена тегов; отсутствующие теги создаются
            status: Начальный статус (pending или completed)
            allow_past_due_date: Разрешить дедлайн в прошлом (импорт)

        Returns:
            Созданная задача с тегами

        Raises:
            ValueError: Если валидация не прошла

        Бизнес-правила:
        1. Название не пустое
        2. Дедлайн в будущем
        3. Категория существует и принадлежит пользователю
        4. Теги уникальны по имени в пределах задачи

        Все проверки выполняются ДО первой записи в БД.
        """
        title = self._clean_title(title)
        description = self._clean_description(description)
        status = TaskStatus(status)
        if status == TaskStatus.DELETED:
            raise ValueError("Cannot create a deleted task")

        if due_date is not None:
            due_date = as_naive_utc(due_date)
            if not allow_past_due_date and due_date <= utc_now():
                raise ValueError("Due date must be in the future")

        category_id = await self._check_category(user_id, category_id)
        names = clean_tag_names(tag_names)

        task = Task(
            user_id=user_id,
            title=title,
            description=description,
            priority=TaskPriority(priority),
            due_date=due_date,
            category_id=category_id,
            status=TaskStatus.PENDING,
        )
        apply_status(task, status)
        task = await self.task_repo.create(task)

        if names:
            tags = await self.tag_repo.bulk_get_or_create(user_id, names)
            await self.task_repo.set_tags(task, tags)

        return task

    async def get_task(self, user_id: int, task_id: int) -> Task:
        """
        Получить задачу пользователя.

        Raises:
            ValueError: Задача не найдена, удалена или чужая
        """
        task = await self.task_repo.get_active(task_id, user_id)
        if not task:
            raise ValueError(f"Task with id {task_id} not found")
        return task

    async def update_task(self, user_id: int, task_id: int, **changes: Any) -> Task:
        """
        Частично обновить задачу.

        Args:
            **changes: Только переданные клиентом поля. Явный None
                очищает description, due_date, category_id и tags.

        Пример:
            # Снять дедлайн и категорию, оставив остальное как есть
            await service.update_task(1, 10, due_date=None, category_id=None)
        """
        task = await self.get_task(user_id, task_id)
        changes = {key: value for key, value in changes.items() if key in TASK_FIELDS}
        updates: dict[str, Any] = {}

        if "title" in changes:
            updates["title"] = self._clean_title(changes["title"])
        if "description" in changes:
            updates["description"] = self._clean_description(changes["description"])
        if changes.get("priority") is not None:
            updates["priority"] = TaskPriority(changes["priority"])
        if "due_date" in changes:
            due_date = changes["due_date"]
            updates["due_date"] = as_naive_utc(due_date) if due_date is not None else None
        if "category_id" in changes:
            updates["category_id"] = await self._check_category(user_id, changes["category_id"])

        if changes.get("status") is not None:
            status = TaskStatus(changes["status"])
            if status == TaskStatus.DELETED:
                raise ValueError("Use DELETE to remove a task")
            apply_status(task, status)

        if "tags" in changes:
            names = clean_tag_names(changes["tags"])
            tags = await self.tag_repo.bulk_get_or_create(user_id, names)
            await self.task_repo.set_tags(task, tags)
            # Связи в task_tags не трогают строку tasks - обновляем метку сами
            updates["updated_at"] = utc_now()

        return await self.task_repo.apply(task, **updates)

    async def set_status(self, user_id: int, task_id: int, status: TaskStatus) -> Task:
        """Отметить задачу выполненной или вернуть в работу."""
        status = TaskStatus(status)
        if status == TaskStatus.DELETED:
            raise ValueError("Use DELETE to remove a task")
        task = await self.get_task(user_id, task_id)
        apply_status(task, status)
        return await self.task_repo.apply(task)

    async def delete_task(self, user_id: int, task_id: int) -> None:
        """Мягко удалить задачу (status = deleted)."""
        task = await self.get_task(user_id, task_id)
        apply_status(task, TaskStatus.DELETED)
        await self.task_repo.apply(task)

    # ========================================================================
    # СПИСОК / BULK / IMPORT-EXPORT
    # ========================================================================

    async def list_tasks(
        self,
        user_id: int,
        filters: TaskFilters | None = None,
        sort: SortOption | None = None,
        page: int = 1,
        limit: int = 20,
        now: datetime | None = None,
    ) -> TaskPage:
        """
        Отфильтровать, отсортировать и разбить на страницы задачи пользователя.

        Конвейер: все неудалённые задачи -> предикат -> компаратор -> страница.
        Без сортировки порядок "новые первыми".
        """
        page = max(page, 1)
        limit = max(limit, 1)

        zone = resolve_zone(await self.user_repo.get_timezone(user_id))
        tasks = await self.task_repo.list_active(user_id)
        visible = sort_tasks(filter_tasks(tasks, filters, now, zone), sort)

        start = (page - 1) * limit
        return TaskPage(
            items=visible[start : start + limit],
            total=len(visible),
            page=page,
            limit=limit,
        )

    async def bulk_update(
        self,
        user_id: int,
        operation: BulkOperation | str,
        task_ids: list[int],
        status: TaskStatus | None = None,
        category_id: int | None = None,
    ) -> int:
        """
        Применить одну операцию к набору задач.

        Операции:
        - delete: мягкое удаление
        - update_status: status обязателен (pending | completed)
        - move_category: category_id обязателен

        Всё или ничего: если хотя бы одна задача не найдена (или чужая,
        или удалена), не меняется ни одна.

        Returns:
            Количество изменённых задач
        """
        try:
            operation = BulkOperation(operation)
        except ValueError as e:
            raise ValueError(f"Unsupported bulk operation: {operation}") from e

        ids = list(dict.fromkeys(task_ids))
        if not ids:
            raise ValueError("Task IDs are required")

        if operation == BulkOperation.UPDATE_STATUS:
            if status is None:
                raise ValueError("Status is required for update_status operation")
            status = TaskStatus(status)
            if status == TaskStatus.DELETED:
                raise ValueError("Use the delete operation to remove tasks")
        if operation == BulkOperation.MOVE_CATEGORY:
            if category_id is None:
                raise ValueError("Category ID is required for move_category operation")
            await self._check_category(user_id, category_id)

        tasks = await self.task_repo.get_active_many(user_id, ids)
        if len(tasks) != len(ids):
            missing = sorted(set(ids) - {task.id for task in tasks})
            raise ValueError(f"Tasks not found: {missing}")

        now = utc_now()
        for task in tasks:
            if operation == BulkOperation.DELETE:
                apply_status(task, TaskStatus.DELETED, now)
            elif operation == BulkOperation.UPDATE_STATUS:
                apply_status(task, status, now)
            else:
                task.category_id = category_id
        await self.db.flush()

        logger.info(
            "Bulk operation applied",
            extra={"operation": operation.value, "affected": len(tasks)},
        )
        return len(tasks)

    async def export_tasks(self, user_id: int) -> list[Task]:
        """Все неудалённые задачи пользователя для выгрузки."""
        return await self.task_repo.list_active(user_id)

    async def import_tasks(
        self, user_id: int, items: list[tuple[int, dict[str, Any]]]
    ) -> ImportResult:
        """
        Создать задачи из выгрузки.

        Args:
            items: Пары (позиция во входном списке, поля для create_task)

        Returns:
            ImportResult: созданные задачи и ошибки по позициям.
            Ошибка в одном элементе не мешает импорту остальных.
        """
        result = ImportResult()
        for index, fields in items:
            try:
                task = await self.create_task(user_id, allow_past_due_date=True, **fields)
            except ValueError as e:
                result.errors.append(ImportItemError(index=index, message=str(e)))
                continue
            result.imported.append(task)

        logger.info(
            "Tasks imported",
            extra={"imported": len(result.imported), "failed": len(result.errors)},
        )
        return result
