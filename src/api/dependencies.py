"""
Dependencies для FastAPI endpoints.

Цепочка зависимостей защищённого endpoint'а:
    get_db -> get_current_user (проверка Bearer токена)
    get_db -> get_task_service / get_category_service / ...

Переопределение в тестах:
    app.dependency_overrides[get_db] = override_get_db
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.logging import user_id_var
from ..models import User
from ..services import (
    AuthenticationError,
    AuthService,
    CategoryService,
    DashboardService,
    TagService,
    TaskService,
    UserService,
)
from .errors import UnauthorizedError

# ============================================================================
# BEARER AUTHENTICATION
# ============================================================================

# auto_error=False: отсутствие заголовка обрабатываем сами (401 в нашем формате)
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Access токен из /api/v1/auth/login. Заголовок: Authorization: Bearer <token>",
)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency: текущий пользователь по access токену.

    Как работает:
    1. Клиент отправляет заголовок Authorization: Bearer <access_token>
    2. Проверяем подпись, срок действия и тип токена
    3. Загружаем пользователя из БД

    Raises:
        UnauthorizedError (401): заголовка нет, токен невалиден/просрочен,
            пользователь удалён. Клиент в ответ делает один refresh и повтор.

    Использование:
        @router.get("/tasks")
        async def list_tasks(current_user: User = Depends(get_current_user)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authenticated")

    try:
        user = await AuthService(db).authenticate(credentials.credentials)
    except AuthenticationError as e:
        raise UnauthorizedError(str(e)) from e

    user_id_var.set(user.id)
    return user


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    """
    Dependency для TaskService.

    Использование:
        @router.post("/tasks")
        async def create_task(service: TaskService = Depends(get_task_service)):
            ...
    """
    return TaskService(db)


async def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


async def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db)


async def get_dashboard_service(db: AsyncSession = Depends(get_db)) -> DashboardService:
    return DashboardService(db)
