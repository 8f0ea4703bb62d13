"""Tag repository with specific queries."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag, Task, TaskStatus, task_tags
from .base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """
    Репозиторий для работы с тегами.

    Имя тега уникально в пределах пользователя, поэтому все методы
    поиска по имени принимают user_id.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Tag, db)

    async def get_by_name(self, user_id: int, name: str) -> Tag | None:
        """
        Получить тег пользователя по имени.

        SQL эквивалент:
            SELECT * FROM tags WHERE user_id = {user_id} AND name = {name};
        """
        result = await self.db.execute(
            select(Tag).where(Tag.user_id == user_id, Tag.name == name)
        )
        return result.scalar_one_or_none()

    async def bulk_get_or_create(self, user_id: int, tag_names: list[str]) -> list[Tag]:
        """
        Массовое получение/создание тегов пользователя.

        Args:
            user_id: Владелец тегов
            tag_names: Имена тегов (дубликаты игнорируются)

        Returns:
            Теги в порядке первого появления имени во входном списке

        Вместо N запросов делаем два: SELECT существующих + INSERT новых.

        Пример:
            tags = await repo.bulk_get_or_create(1, ["work", "urgent", "work"])
            # -> [<Tag work>, <Tag urgent>]
        """
        names = list(dict.fromkeys(tag_names))
        if not names:
            return []

        result = await self.db.execute(
            select(Tag).where(Tag.user_id == user_id, Tag.name.in_(names))
        )
        by_name = {tag.name: tag for tag in result.scalars().all()}

        new_tags = []
        for name in names:
            if name not in by_name:
                tag = Tag(user_id=user_id, name=name)
                self.db.add(tag)
                by_name[name] = tag
                new_tags.append(tag)

        if new_tags:
            await self.db.flush()
            for tag in new_tags:
                await self.db.refresh(tag)

        return [by_name[name] for name in names]

    async def usage_count(self, tag_id: int) -> int:
        """
        Сколько неудалённых задач помечено тегом.

        SQL эквивалент:
            SELECT COUNT(*) FROM task_tags
            JOIN tasks ON tasks.id = task_tags.task_id
            WHERE task_tags.tag_id = {tag_id} AND tasks.status != 'deleted';
        """
        result = await self.db.execute(
            select(func.count())
            .select_from(task_tags)
            .join(Task, Task.id == task_tags.c.task_id)
            .where(task_tags.c.tag_id == tag_id, Task.status != TaskStatus.DELETED)
        )
        return result.scalar_one()

    async def get_with_usage(self, user_id: int) -> list[tuple[Tag, int]]:
        """
        Теги пользователя с количеством использований, по имени.

        SQL эквивалент:
            SELECT tags.*, COUNT(tasks.id) AS usage_count
            FROM tags
            LEFT JOIN task_tags ON tags.id = task_tags.tag_id
            LEFT JOIN tasks ON tasks.id = task_tags.task_id AND tasks.status != 'deleted'
            WHERE tags.user_id = {user_id}
            GROUP BY tags.id
            ORDER BY tags.name;
        """
        result = await self.db.execute(
            select(Tag, func.count(Task.id).label("usage_count"))
            .outerjoin(task_tags, Tag.id == task_tags.c.tag_id)
            .outerjoin(
                Task,
                (Task.id == task_tags.c.task_id) & (Task.status != TaskStatus.DELETED),
            )
            .where(Tag.user_id == user_id)
            .group_by(Tag.id)
            .order_by(Tag.name)
        )
        return [(row[0], row[1]) for row in result.all()]
