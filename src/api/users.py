"""API endpoints профиля и настроек текущего пользователя."""

from fastapi import APIRouter, Depends, Response, status

from ..models import User
from ..services import UserService
from .dependencies import get_current_user, get_user_service
from .errors import from_value_error
from .schemas import (
    ErrorResponse,
    UserResponse,
    UserSettingsResponse,
    UserSettingsUpdate,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=UserResponse, summary="Профиль")
async def get_profile(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put(
    "/profile",
    response_model=UserResponse,
    summary="Обновить профиль",
    responses={400: {"model": ErrorResponse, "description": "Email уже занят"}},
)
async def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await service.update_profile(
            current_user.id, **data.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return UserResponse.model_validate(user)


@router.delete(
    "/account",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить аккаунт",
    description="Удаляет пользователя вместе со всеми задачами, категориями и тегами.",
)
async def delete_account(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> Response:
    try:
        await service.delete_account(current_user.id)
    except ValueError as e:
        raise from_value_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/settings", response_model=UserSettingsResponse, summary="Настройки")
async def get_settings(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserSettingsResponse:
    user_settings = await service.get_settings(current_user.id)
    return UserSettingsResponse.model_validate(user_settings)


@router.put("/settings", response_model=UserSettingsResponse, summary="Обновить настройки")
async def update_settings(
    data: UserSettingsUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserSettingsResponse:
    try:
        user_settings = await service.update_settings(
            current_user.id, **data.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return UserSettingsResponse.model_validate(user_settings)
