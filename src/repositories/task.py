"""Task repository with specific queries."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag, Task, TaskStatus
from .base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """
    Репозиторий для работы с задачами.

    "Active" в названиях методов означает: задача не удалена (status != deleted).
    Удалённые задачи остаются в БД, но не видны ни в одной выборке по умолчанию.
    Теги подгружаются автоматически (relationship lazy="selectin").
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Task, db)

    async def get_active(self, task_id: int, user_id: int) -> Task | None:
        """
        Получить задачу пользователя, если она не удалена.

        SQL эквивалент:
            SELECT * FROM tasks
            WHERE id = {task_id} AND user_id = {user_id} AND status != 'deleted';
        """
        result = await self.db.execute(
            select(Task).where(
                Task.id == task_id,
                Task.user_id == user_id,
                Task.status != TaskStatus.DELETED,
            )
        )
        return result.scalar_one_or_none()

    async def list_active(self, user_id: int) -> list[Task]:
        """
        Все неудалённые задачи пользователя (новые первыми).

        Это вход для фильтрации/сортировки/статистики: конвейер
        работает над полным списком пользователя в памяти.

        SQL эквивалент:
            SELECT * FROM tasks
            WHERE user_id = {user_id} AND status != 'deleted'
            ORDER BY created_at DESC, id DESC;
        """
        result = await self.db.execute(
            select(Task)
            .where(Task.user_id == user_id, Task.status != TaskStatus.DELETED)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        return list(result.scalars().all())

    async def get_active_many(self, user_id: int, task_ids: Iterable[int]) -> list[Task]:
        """
        Неудалённые задачи пользователя из списка ID.

        Чужие, удалённые и несуществующие ID просто отсутствуют в результате:
        вызывающий код сравнивает размер ответа с запросом.

        SQL эквивалент:
            SELECT * FROM tasks
            WHERE id IN (...) AND user_id = {user_id} AND status != 'deleted';
        """
        ids = set(task_ids)
        if not ids:
            return []
        result = await self.db.execute(
            select(Task).where(
                Task.id.in_(ids),
                Task.user_id == user_id,
                Task.status != TaskStatus.DELETED,
            )
        )
        return list(result.scalars().all())

    async def set_tags(self, task: Task, tags: list[Tag]) -> Task:
        """
        Заменить набор тегов задачи.

        SQLAlchemy сам посчитает разницу и выполнит INSERT/DELETE в task_tags.
        """
        task.tags = list(tags)
        await self.db.flush()
        return task
