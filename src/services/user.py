"""User profile and settings service."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import Theme, User, UserSettings
from ..query.dates import is_known_zone
from ..repositories import UserRepository
from ..repositories.user import normalize_email

logger = get_logger(__name__)

PROFILE_FIELDS = frozenset({"name", "email", "avatar_url"})
SETTINGS_FIELDS = frozenset({"theme", "notifications_enabled", "timezone"})


class UserService:
    """Сервис профиля пользователя."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def get_profile(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise ValueError(f"User with id {user_id} not found")
        return user

    async def update_profile(self, user_id: int, **changes: Any) -> User:
        """
        Частично обновить профиль.

        Args:
            user_id: ID пользователя
            **changes: name, email, avatar_url (только переданные поля)

        Raises:
            ValueError: Пустое имя или email занят другим пользователем
        """
        user = await self.get_profile(user_id)
        updates = {key: value for key, value in changes.items() if key in PROFILE_FIELDS}

        if "name" in updates:
            if not updates["name"] or not updates["name"].strip():
                raise ValueError("Name cannot be empty")
            updates["name"] = updates["name"].strip()

        if "email" in updates:
            if not updates["email"]:
                raise ValueError("Email cannot be empty")
            updates["email"] = normalize_email(updates["email"])
            if await self.user_repo.email_taken(updates["email"], exclude_user_id=user_id):
                raise ValueError(f"User with email '{updates['email']}' already exists")

        return await self.user_repo.apply(user, **updates)

    async def delete_account(self, user_id: int) -> None:
        """
        Удалить аккаунт со всеми данными.

        Задачи, категории, теги и настройки удаляет БД (ON DELETE CASCADE).
        """
        if not await self.user_repo.delete(user_id):
            raise ValueError(f"User with id {user_id} not found")
        logger.info("User account deleted", extra={"deleted_user_id": user_id})

    async def get_settings(self, user_id: int) -> UserSettings:
        return await self.user_repo.get_or_create_settings(user_id)

    async def update_settings(self, user_id: int, **changes: Any) -> UserSettings:
        """Частично обновить настройки (theme, notifications_enabled, timezone)."""
        user_settings = await self.user_repo.get_or_create_settings(user_id)
        updates = {
            key: value
            for key, value in changes.items()
            if key in SETTINGS_FIELDS and value is not None
        }
        if "theme" in updates:
            updates["theme"] = Theme(updates["theme"])
        if "timezone" in updates:
            updates["timezone"] = updates["timezone"].strip()
            if not is_known_zone(updates["timezone"]):
                raise ValueError(f"Unknown timezone: {updates['timezone']!r}")
        return await self.user_repo.apply(user_settings, **updates)
