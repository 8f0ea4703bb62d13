"""
API endpoints аутентификации.

Публичные (без Bearer токена): register, login, refresh, logout.
Access токен живёт 30 минут, refresh - 7 дней.
"""

from fastapi import APIRouter, Depends, status

from ..core.security import TokenPair
from ..models import User
from ..services import AuthenticationError, AuthService
from .dependencies import get_auth_service
from .errors import UnauthorizedError, from_value_error
from .schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])

UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Неверные учётные данные"}}


def _auth_response(user: User, tokens: TokenPair) -> AuthResponse:
    return AuthResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
        expires_in=tokens.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация",
    responses={400: {"model": ErrorResponse, "description": "Email занят, пароли не совпадают"}},
)
async def register(
    data: RegisterRequest, service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Создать аккаунт и сразу войти.

    Пример запроса:
    ```json
    {"name": "Anna", "email": "anna@example.com",
     "password": "s3cret-pass", "confirm_password": "s3cret-pass"}
    ```
    """
    try:
        user, tokens = await service.register(
            name=data.name,
            email=data.email,
            password=data.password,
            confirm_password=data.confirm_password,
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return _auth_response(user, tokens)


@router.post("/login", response_model=AuthResponse, summary="Вход", responses=UNAUTHORIZED)
async def login(
    data: LoginRequest, service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    try:
        user, tokens = await service.login(data.email, data.password)
    except AuthenticationError as e:
        raise UnauthorizedError(str(e)) from e
    return _auth_response(user, tokens)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Обновить пару токенов",
    responses=UNAUTHORIZED,
)
async def refresh(
    data: RefreshRequest, service: AuthService = Depends(get_auth_service)
) -> TokenResponse:
    """
    Обменять refresh токен на новую пару.

    Клиент вызывает этот endpoint ровно один раз после 401 на обычном запросе,
    затем повторяет исходный запрос с новым access токеном.
    """
    try:
        tokens = await service.refresh(data.refresh_token)
    except AuthenticationError as e:
        raise UnauthorizedError(str(e)) from e
    return TokenResponse.model_validate(tokens)


@router.post("/logout", response_model=MessageResponse, summary="Выход")
async def logout() -> MessageResponse:
    """Токены не хранятся на сервере: клиент просто удаляет их у себя."""
    return MessageResponse(message="Logged out")
