"""Tag service with business logic."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import DEFAULT_TAG_COLOR, Tag
from ..repositories import TagRepository
from .category import validate_color

TAG_NAME_MAX_LENGTH = 30


def clean_tag_name(name: str | None) -> str:
    """Обрезать пробелы и проверить длину имени тега."""
    if not name or not name.strip():
        raise ValueError("Tag name cannot be empty")
    name = name.strip()
    if len(name) > TAG_NAME_MAX_LENGTH:
        raise ValueError(f"Tag name must not exceed {TAG_NAME_MAX_LENGTH} characters")
    return name


def clean_tag_names(names: list[str] | None) -> list[str]:
    """Нормализовать список имён тегов задачи: без пустых и без дубликатов."""
    cleaned = [clean_tag_name(name) for name in (names or []) if name and name.strip()]
    return list(dict.fromkeys(cleaned))


class TagService:
    """
    Сервис для работы с тегами.

    Теги создаются явно (POST /tags) или неявно при создании задачи
    с новым именем тега. Тег, которым помечена хотя бы одна задача,
    удалить нельзя.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tag_repo = TagRepository(db)

    async def list_tags(self, user_id: int) -> list[tuple[Tag, int]]:
        """Теги пользователя с количеством использований."""
        return await self.tag_repo.get_with_usage(user_id)

    async def get_tag(self, user_id: int, tag_id: int) -> Tag:
        tag = await self.tag_repo.get_owned(tag_id, user_id)
        if not tag:
            raise ValueError(f"Tag with id {tag_id} not found")
        return tag

    async def create_tag(self, user_id: int, name: str, color: str | None = None) -> Tag:
        """
        Создать тег.

        Raises:
            ValueError: Пустое/длинное имя, тег уже существует, неверный цвет
        """
        name = clean_tag_name(name)
        if await self.tag_repo.get_by_name(user_id, name):
            raise ValueError(f"Tag '{name}' already exists")

        tag = Tag(
            user_id=user_id,
            name=name,
            color=validate_color(color) if color else DEFAULT_TAG_COLOR,
        )
        return await self.tag_repo.create(tag)

    async def update_tag(self, user_id: int, tag_id: int, **changes: Any) -> Tag:
        """Переименовать тег и/или сменить цвет."""
        tag = await self.get_tag(user_id, tag_id)
        updates: dict[str, Any] = {}

        if changes.get("name") is not None:
            name = clean_tag_name(changes["name"])
            existing = await self.tag_repo.get_by_name(user_id, name)
            if existing and existing.id != tag.id:
                raise ValueError(f"Tag '{name}' already exists")
            updates["name"] = name

        if changes.get("color") is not None:
            updates["color"] = validate_color(changes["color"])

        return await self.tag_repo.apply(tag, **updates)

    async def delete_tag(self, user_id: int, tag_id: int) -> None:
        """
        Удалить неиспользуемый тег.

        Raises:
            ValueError: Тег не найден или им помечены задачи
        """
        tag = await self.get_tag(user_id, tag_id)
        usage = await self.tag_repo.usage_count(tag.id)
        if usage:
            raise ValueError(f"Tag '{tag.name}' is used by {usage} task(s) and cannot be deleted")
        await self.tag_repo.delete(tag.id)
