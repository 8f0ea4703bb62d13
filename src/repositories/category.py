"""Category repository."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Category, Task, TaskStatus
from .base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Репозиторий категорий (все выборки ограничены владельцем)."""

    def __init__(self, db: AsyncSession):
        super().__init__(Category, db)

    async def get_by_name(self, user_id: int, name: str) -> Category | None:
        """
        Найти категорию пользователя по имени (без учёта регистра).

        SQL эквивалент:
            SELECT * FROM categories
            WHERE user_id = {user_id} AND LOWER(name) = LOWER({name});
        """
        result = await self.db.execute(
            select(Category).where(
                Category.user_id == user_id,
                func.lower(Category.name) == name.strip().lower(),
            )
        )
        return result.scalar_one_or_none()

    async def get_with_task_counts(self, user_id: int) -> list[tuple[Category, int]]:
        """
        Категории пользователя с количеством активных (не удалённых) задач.

        SQL эквивалент:
            SELECT categories.*, COUNT(tasks.id) AS task_count
            FROM categories
            LEFT JOIN tasks ON tasks.category_id = categories.id
                           AND tasks.status != 'deleted'
            WHERE categories.user_id = {user_id}
            GROUP BY categories.id
            ORDER BY categories.name;
        """
        result = await self.db.execute(
            select(Category, func.count(Task.id).label("task_count"))
            .outerjoin(
                Task,
                (Task.category_id == Category.id) & (Task.status != TaskStatus.DELETED),
            )
            .where(Category.user_id == user_id)
            .group_by(Category.id)
            .order_by(Category.name)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def detach_tasks(self, category_id: int) -> int:
        """
        Отвязать все задачи от категории (category_id = NULL).

        Returns:
            Количество отвязанных задач

        SQL эквивалент:
            UPDATE tasks SET category_id = NULL WHERE category_id = {category_id};
        """
        result = await self.db.execute(
            update(Task)
            .where(Task.category_id == category_id)
            .values(category_id=None)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
