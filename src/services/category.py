"""Category service with business logic."""

import re
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import DEFAULT_CATEGORY_COLOR, Category
from ..repositories import CategoryRepository

logger = get_logger(__name__)

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
CATEGORY_NAME_MAX_LENGTH = 50
CATEGORY_DESCRIPTION_MAX_LENGTH = 200


def validate_color(color: str) -> str:
    """Цвет в формате #RRGGBB (хранится в верхнем регистре)."""
    if not COLOR_PATTERN.match(color or ""):
        raise ValueError(f"Color must be a hex value like #3B82F6, got '{color}'")
    return color.upper()


class CategoryService:
    """
    Сервис для работы с категориями.

    Категория - именованная цветная группа задач пользователя.
    Удаление категории НЕ удаляет задачи: они остаются без категории.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.category_repo = CategoryRepository(db)

    def _clean_name(self, name: str | None) -> str:
        if not name or not name.strip():
            raise ValueError("Category name cannot be empty")
        name = name.strip()
        if len(name) > CATEGORY_NAME_MAX_LENGTH:
            raise ValueError(
                f"Category name must not exceed {CATEGORY_NAME_MAX_LENGTH} characters"
            )
        return name

    def _clean_description(self, description: str | None) -> str | None:
        if description is None or not description.strip():
            return None
        if len(description) > CATEGORY_DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                "Category description must not exceed "
                f"{CATEGORY_DESCRIPTION_MAX_LENGTH} characters"
            )
        return description.strip()

    async def list_categories(self, user_id: int) -> list[tuple[Category, int]]:
        """Категории пользователя (по имени) с количеством активных задач."""
        return await self.category_repo.get_with_task_counts(user_id)

    async def get_category(self, user_id: int, category_id: int) -> Category:
        """
        Получить категорию пользователя.

        Raises:
            ValueError: Категория не найдена (или принадлежит другому пользователю)
        """
        category = await self.category_repo.get_owned(category_id, user_id)
        if not category:
            raise ValueError(f"Category with id {category_id} not found")
        return category

    async def create_category(
        self,
        user_id: int,
        name: str,
        color: str | None = None,
        description: str | None = None,
    ) -> Category:
        """
        Создать категорию.

        Бизнес-правила:
        1. Название не пустое, не длиннее 50 символов
        2. Название уникально в пределах пользователя (без учёта регистра)
        3. Цвет #RRGGBB, по умолчанию #3B82F6
        """
        name = self._clean_name(name)
        if await self.category_repo.get_by_name(user_id, name):
            raise ValueError(f"Category '{name}' already exists")

        category = Category(
            user_id=user_id,
            name=name,
            color=validate_color(color) if color else DEFAULT_CATEGORY_COLOR,
            description=self._clean_description(description),
        )
        return await self.category_repo.create(category)

    async def update_category(self, user_id: int, category_id: int, **changes: Any) -> Category:
        """
        Частично обновить категорию (name, color, description).

        Явный None в description очищает описание.
        """
        category = await self.get_category(user_id, category_id)
        updates: dict[str, Any] = {}

        if "name" in changes:
            name = self._clean_name(changes["name"])
            existing = await self.category_repo.get_by_name(user_id, name)
            if existing and existing.id != category.id:
                raise ValueError(f"Category '{name}' already exists")
            updates["name"] = name

        if changes.get("color") is not None:
            updates["color"] = validate_color(changes["color"])

        if "description" in changes:
            updates["description"] = self._clean_description(changes["description"])

        return await self.category_repo.apply(category, **updates)

    async def delete_category(self, user_id: int, category_id: int) -> int:
        """
        Удалить категорию, отвязав от неё задачи.

        Returns:
            Количество задач, оставшихся без категории
        """
        category = await self.get_category(user_id, category_id)
        detached = await self.category_repo.detach_tasks(category.id)
        await self.category_repo.delete(category.id)
        logger.info(
            "Category deleted",
            extra={"category_id": category_id, "detached_tasks": detached},
        )
        return detached
