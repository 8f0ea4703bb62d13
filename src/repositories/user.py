"""User repository (accounts and per-user settings)."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User, UserSettings
from .base import BaseRepository


def normalize_email(email: str) -> str:
    """Email - логин, сравниваем без учёта регистра и пробелов по краям."""
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Репозиторий пользователей."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> User | None:
        """
        Найти пользователя по email.

        SQL эквивалент:
            SELECT * FROM users WHERE LOWER(email) = LOWER({email});
        """
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_user_id: int | None = None) -> bool:
        """Проверить, занят ли email другим пользователем."""
        user = await self.get_by_email(email)
        return user is not None and user.id != exclude_user_id

    async def get_settings(self, user_id: int) -> UserSettings | None:
        result = await self.db.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create_settings(self, user_id: int) -> UserSettings:
        """
        Получить настройки пользователя, создав их со значениями по умолчанию.

        Настройки создаются лениво: строки в user_settings нет,
        пока пользователь впервые их не запросит.
        """
        user_settings = await self.get_settings(user_id)
        if user_settings is None:
            user_settings = UserSettings(user_id=user_id)
            self.db.add(user_settings)
            await self.db.flush()
            await self.db.refresh(user_settings)
        return user_settings

    async def get_timezone(self, user_id: int) -> str | None:
        """Часовой пояс из настроек (None, если настройки ещё не созданы)."""
        result = await self.db.execute(
            select(UserSettings.timezone).where(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()
