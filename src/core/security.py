"""Password hashing and JWT token helpers."""

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from .config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenError(Exception):
    """Токен отсутствует, подделан, просрочен или не того типа."""


class ExpiredTokenError(TokenError):
    """Подпись верна, но срок действия токена истёк."""


# ============================================================================
# PASSWORDS
# ============================================================================


def _prehash(password: str) -> bytes:
    # bcrypt обрезает ввод до 72 байт, поэтому хешируем SHA-256 заранее
    return hashlib.sha256(password.encode("utf-8")).digest()


def hash_password(password: str) -> str:
    """
    Захешировать пароль (bcrypt с солью).

    Returns:
        Хеш в виде строки для хранения в users.password_hash
    """
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Проверить пароль против сохранённого хеша."""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # Хеш в БД повреждён или не bcrypt
        return False


# ============================================================================
# JWT
# ============================================================================


@dataclass(frozen=True)
class TokenPair:
    """Access + refresh токены, выдаваемые при логине и refresh."""

    access_token: str
    refresh_token: str
    expires_in: int  # секунды жизни access токена
    token_type: str = "bearer"


def _encode(subject: int, token_type: str, expires_delta: timedelta, secret: str) -> str:
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(subject),
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Создать короткоживущий access токен."""
    delta = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(user_id, ACCESS_TOKEN_TYPE, delta, settings.JWT_SECRET)


def create_refresh_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Создать долгоживущий refresh токен (подписан отдельным секретом)."""
    delta = expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(user_id, REFRESH_TOKEN_TYPE, delta, settings.JWT_REFRESH_SECRET)


def create_token_pair(user_id: int) -> TokenPair:
    """Выдать пару токенов для пользователя."""
    return TokenPair(
        access_token=create_access_token(user_id),
        refresh_token=create_refresh_token(user_id),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def _decode(token: str, token_type: str, secret: str) -> int:
    if not token:
        raise TokenError("Token is missing")

    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise ExpiredTokenError("Token has expired") from e
    except JWTError as e:
        raise TokenError("Invalid token") from e

    if payload.get("type") != token_type:
        raise TokenError(f"Expected {token_type} token")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise TokenError("Invalid token subject") from e


def decode_access_token(token: str) -> int:
    """
    Проверить access токен.

    Returns:
        ID пользователя из claim "sub"

    Raises:
        TokenError: токен невалиден / просрочен / не access
    """
    return _decode(token, ACCESS_TOKEN_TYPE, settings.JWT_SECRET)


def decode_refresh_token(token: str) -> int:
    """Проверить refresh токен. Допускает префикс "Bearer "."""
    if token.startswith("Bearer "):
        token = token[len("Bearer ") :]
    return _decode(token, REFRESH_TOKEN_TYPE, settings.JWT_REFRESH_SECRET)
