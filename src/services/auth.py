"""Authentication service: registration, login and token refresh."""

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.logging import get_logger
from ..core.security import (
    TokenError,
    TokenPair,
    create_token_pair,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from ..models import User
from ..repositories import UserRepository
from ..repositories.user import normalize_email

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Неверные учётные данные или невалидный токен (HTTP 401)."""


class AuthService:
    """
    Сервис аутентификации.

    Токены не хранятся в БД: access и refresh - самодостаточные JWT,
    поэтому logout на сервере ничего не делает (клиент просто забывает токены).
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def register(
        self, name: str, email: str, password: str, confirm_password: str
    ) -> tuple[User, TokenPair]:
        """
        Зарегистрировать пользователя и сразу выдать токены.

        Raises:
            ValueError: Пароли не совпадают, пароль короткий, email занят

        Бизнес-правила:
        1. Имя не пустое
        2. password == confirm_password
        3. Длина пароля >= PASSWORD_MIN_LENGTH
        4. Email уникален (без учёта регистра)
        """
        if not name or not name.strip():
            raise ValueError("Name cannot be empty")
        if password != confirm_password:
            raise ValueError("Passwords do not match")
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
            )
        if await self.user_repo.email_taken(email):
            raise ValueError(f"User with email '{normalize_email(email)}' already exists")

        user = await self.user_repo.create(
            User(
                name=name.strip(),
                email=normalize_email(email),
                password_hash=hash_password(password),
            )
        )
        logger.info("User registered", extra={"registered_user_id": user.id})
        return user, create_token_pair(user.id)

    async def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        """
        Проверить email + пароль и выдать пару токенов.

        Raises:
            AuthenticationError: Пользователь не найден или пароль неверный
                (причина не раскрывается)
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthenticationError("Invalid email or password")
        return user, create_token_pair(user.id)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Обменять refresh токен на новую пару токенов.

        Raises:
            AuthenticationError: Токен невалиден/просрочен или пользователь удалён
        """
        try:
            user_id = decode_refresh_token(refresh_token)
        except TokenError as e:
            raise AuthenticationError(str(e)) from e

        if not await self.user_repo.exists(user_id):
            raise AuthenticationError("User no longer exists")
        return create_token_pair(user_id)

    async def authenticate(self, access_token: str) -> User:
        """
        Найти пользователя по access токену (используется в dependency).

        Raises:
            AuthenticationError: Токен невалиден/просрочен или пользователь удалён
        """
        try:
            user_id = decode_access_token(access_token)
        except TokenError as e:
            raise AuthenticationError(str(e)) from e

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise AuthenticationError("User no longer exists")
        return user
