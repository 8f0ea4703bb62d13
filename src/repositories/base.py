"""Base repository with common CRUD and owner-scoped operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий с CRUD операциями.

    Generic[ModelType] - работает с любой моделью, наследующейся от Base.
    Модели, у которых есть колонка user_id, дополнительно получают
    "owner-scoped" методы: пользователь никогда не видит чужие записи.

    Пример использования:
        category_repo = BaseRepository[Category](Category, db_session)
        category = await category_repo.get_owned(1, user_id=42)
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """
        Args:
            model: Класс модели SQLAlchemy (например, Task, Category)
            db: Асинхронная сессия базы данных
        """
        self.model = model
        self.db = db

    async def create(self, obj: ModelType) -> ModelType:
        """
        Создать новую запись в БД.

        Returns:
            Созданный объект с заполненным ID и timestamps

        Пример:
            tag = Tag(user_id=1, name="work")
            created = await repo.create(tag)
            print(created.id)  # 1 (автоматически из БД)
        """
        self.db.add(obj)
        await self.db.flush()  # отправляет INSERT, но не commit
        await self.db.refresh(obj)  # подтягивает ID и server-side значения
        return obj

    async def get_by_id(self, id: int) -> ModelType | None:
        """
        Получить объект по ID (без проверки владельца).

        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} LIMIT 1;
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_owned(self, id: int, user_id: int) -> ModelType | None:
        """
        Получить объект по ID, только если он принадлежит пользователю.

        Чужая запись и несуществующая неотличимы: в обоих случаях None.

        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} AND user_id = {user_id};
        """
        result = await self.db.execute(
            select(self.model).where(self.model.id == id, self.model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """
        Получить все записи с пагинацией.

        SQL эквивалент:
            SELECT * FROM table OFFSET {skip} LIMIT {limit};
        """
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def list_owned(self, user_id: int) -> list[ModelType]:
        """
        Все записи пользователя в порядке создания.

        SQL эквивалент:
            SELECT * FROM table WHERE user_id = {user_id} ORDER BY id;
        """
        result = await self.db.execute(
            select(self.model).where(self.model.user_id == user_id).order_by(self.model.id)
        )
        return list(result.scalars().all())

    async def update(self, id: int, **kwargs: Any) -> ModelType | None:
        """
        Обновить запись по ID.

        Args:
            id: Первичный ключ записи
            **kwargs: Поля для обновления (name="Работа", color="#FF0000")

        Returns:
            Обновлённый объект или None, если не найден

        SQL эквивалент:
            UPDATE table SET field1=value1, field2=value2 WHERE id={id};
        """
        obj = await self.get_by_id(id)
        if not obj:
            return None
        return await self.apply(obj, **kwargs)

    async def apply(self, obj: ModelType, **kwargs: Any) -> ModelType:
        """Применить изменения к уже загруженному объекту и сохранить."""
        for key, value in kwargs.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, id: int) -> bool:
        """
        Удалить запись по ID.

        Returns:
            True если удалено, False если не найдено

        SQL эквивалент:
            DELETE FROM table WHERE id={id};
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

    async def exists(self, id: int) -> bool:
        """SELECT EXISTS(SELECT 1 FROM table WHERE id={id});"""
        return await self.get_by_id(id) is not None

    async def count(self) -> int:
        """
        Подсчитать количество записей.

        SQL эквивалент:
            SELECT COUNT(*) FROM table;
        """
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()
