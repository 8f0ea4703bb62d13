"""
Pydantic схемы для API.

DTOs (Data Transfer Objects) - объекты для передачи данных через HTTP.
Модели SQLAlchemy наружу не отдаются: ответы строятся через
model_validate(orm_object) благодаря from_attributes=True.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..models import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_TAG_COLOR,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    BulkOperation,
    TaskPriority,
    TaskStatus,
    Theme,
)

COLOR_REGEX = r"^#[0-9A-Fa-f]{6}$"
EMAIL_REGEX = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ============================================================================
# AUTH SCHEMAS
# ============================================================================


class RegisterRequest(BaseModel):
    """
    Схема регистрации (POST /auth/register).

    Пример запроса:
    {
        "name": "Anna",
        "email": "anna@example.com",
        "password": "s3cret-pass",
        "confirm_password": "s3cret-pass"
    }
    """

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_REGEX)
    password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    """Тело POST /auth/refresh. Префикс "Bearer " допускается."""

    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Время жизни access токена, секунды")

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# USER SCHEMAS
# ============================================================================


class UserResponse(BaseModel):
    """
    Профиль пользователя. Хеш пароля наружу не отдаётся.

    Пример ответа:
    {
        "id": 1,
        "email": "anna@example.com",
        "name": "Anna",
        "avatar_url": null,
        "email_verified": false,
        "created_at": "2026-10-19T12:00:00",
        "updated_at": "2026-10-19T12:00:00"
    }
    """

    id: int
    email: str
    name: str
    avatar_url: str | None
    email_verified: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(TokenResponse):
    """Ответ регистрации и логина: токены + профиль."""

    user: UserResponse


class UserUpdate(BaseModel):
    """PUT /users/profile - все поля опциональные."""

    name: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_REGEX)
    avatar_url: str | None = Field(None, max_length=500)


class UserSettingsResponse(BaseModel):
    theme: Theme
    notifications_enabled: bool
    timezone: str
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSettingsUpdate(BaseModel):
    theme: Theme | None = None
    notifications_enabled: bool | None = None
    timezone: str | None = Field(None, min_length=1, max_length=50)


# ============================================================================
# TAG SCHEMAS
# ============================================================================


class TagBrief(BaseModel):
    """Тег внутри TaskResponse."""

    id: int
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class TagCreate(BaseModel):
    """
    Схема для создания тега (POST /tags).

    Пример:
    {"name": "urgent", "color": "#EF4444"}
    """

    name: str = Field(..., min_length=1, max_length=30)
    color: str | None = Field(
        None, pattern=COLOR_REGEX, description=f"По умолчанию {DEFAULT_TAG_COLOR}"
    )


class TagUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=30)
    color: str | None = Field(None, pattern=COLOR_REGEX)


class TagResponse(TagBrief):
    usage_count: int = Field(0, description="Количество неудалённых задач с этим тегом")
    created_at: datetime


# ============================================================================
# CATEGORY SCHEMAS
# ============================================================================


class CategoryCreate(BaseModel):
    """
    Схема для создания категории (POST /categories).

    Пример:
    {"name": "Work", "color": "#10B981", "description": "Рабочие задачи"}
    """

    name: str = Field(..., min_length=1, max_length=50)
    color: str | None = Field(
        None, pattern=COLOR_REGEX, description=f"По умолчанию {DEFAULT_CATEGORY_COLOR}"
    )
    description: str | None = Field(None, max_length=200)


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    color: str | None = Field(None, pattern=COLOR_REGEX)
    description: str | None = Field(None, max_length=200)


class CategoryResponse(BaseModel):
    id: int
    name: str
    color: str
    description: str | None
    task_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# TASK SCHEMAS
# ============================================================================


class TaskCreate(BaseModel):
    """
    Схема для создания задачи (POST /tasks).

    Теги передаются именами: несуществующие создаются автоматически.

    Пример запроса:
    {
        "title": "Подготовить отчёт",
        "priority": "high",
        "due_date": "2026-10-25T18:00:00",
        "category_id": 2,
        "tags": ["work", "urgent"]
    }
    """

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = Field(None, description="Дедлайн, должен быть в будущем")
    category_id: int | None = Field(None, ge=1)
    tags: list[str] = Field(default_factory=list, description="Имена тегов")


class TaskUpdate(BaseModel):
    """
    Схема для обновления задачи (PUT /tasks/{id}).

    Все поля опциональные. Переданный null очищает поле
    (description, due_date, category_id, tags).
    """

    title: str | None = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    category_id: int | None = Field(None, ge=1)
    tags: list[str] | None = None


class TaskStatusUpdate(BaseModel):
    """PATCH /tasks/{id}/status. Удаление - только через DELETE."""

    status: TaskStatus


class TaskResponse(BaseModel):
    """
    Схема задачи в ответе API.

    Пример ответа:
    {
        "id": 10,
        "title": "Подготовить отчёт",
        "description": null,
        "status": "completed",
        "priority": "high",
        "due_date": "2026-10-25T18:00:00",
        "completed_at": "2026-10-24T09:12:44",
        "category_id": 2,
        "tags": [{"id": 1, "name": "work", "color": "#6B7280"}],
        "created_at": "2026-10-19T12:00:00",
        "updated_at": "2026-10-24T09:12:44"
    }
    """

    id: int
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    completed_at: datetime | None
    category_id: int | None
    tags: list[TagBrief] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskListResponse(BaseModel):
    """Страница списка задач (GET /tasks)."""

    items: list[TaskResponse]
    total: int = Field(..., description="Сколько задач прошло фильтр")
    page: int
    limit: int
    total_pages: int

    model_config = ConfigDict(from_attributes=True)


class BulkTaskRequest(BaseModel):
    """
    POST /tasks/bulk.

    Примеры:
    {"operation": "delete", "task_ids": [1, 2, 3]}
    {"operation": "update_status", "task_ids": [1, 2], "status": "completed"}
    {"operation": "move_category", "task_ids": [4], "category_id": 2}
    """

    operation: BulkOperation
    task_ids: list[int] = Field(..., min_length=1)
    status: TaskStatus | None = None
    category_id: int | None = Field(None, ge=1)


class BulkTaskResponse(BaseModel):
    operation: BulkOperation
    affected: int


class TaskImportItem(BaseModel):
    """Один элемент импорта. Дедлайн в прошлом допустим."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    category_id: int | None = Field(None, ge=1)
    tags: list[str] = Field(default_factory=list)


class TaskImportRequest(BaseModel):
    """
    POST /tasks/import. Элементы валидируются по одному,
    поэтому приходят как "сырые" объекты.
    """

    tasks: list[dict[str, Any]] = Field(..., min_length=1)


class ImportErrorItem(BaseModel):
    index: int
    message: str


class TaskImportResponse(BaseModel):
    imported: int
    failed: int
    tasks: list[TaskResponse]
    errors: list[ImportErrorItem]


class TaskExportResponse(BaseModel):
    exported_at: datetime
    count: int
    tasks: list[TaskResponse]


# ============================================================================
# DASHBOARD SCHEMAS
# ============================================================================


class DashboardStatistics(BaseModel):
    """
    GET /dashboard/statistics.

    Пример:
    {
        "total_tasks": 3, "completed_tasks": 1, "pending_tasks": 2,
        "overdue_tasks": 1, "today_tasks": 0, "upcoming_tasks": 0,
        "completion_rate": 33
    }
    """

    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    today_tasks: int
    upcoming_tasks: int
    completion_rate: int = Field(..., ge=0, le=100)

    model_config = ConfigDict(from_attributes=True)


class ActivityResponse(BaseModel):
    recent_tasks: list[TaskResponse]
    created_this_week: int
    completed_this_week: int

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class ErrorDetail(BaseModel):
    """
    Детали ошибки для конкретного поля.

    Пример:
    {"field": "title", "message": "String should have at least 1 character"}
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    """
    Тело ошибки с кодом и деталями.

    Коды:
    - VALIDATION_ERROR: ошибка валидации полей или бизнес-правила
    - NOT_FOUND: ресурс не найден
    - ALREADY_EXISTS: ресурс уже существует
    - UNAUTHORIZED: нет/невалидный токен, неверный пароль
    - RATE_LIMIT_EXCEEDED: слишком много запросов
    - INTERNAL_ERROR: внутренняя ошибка сервера
    """

    code: str = Field(..., description="Код ошибки (VALIDATION_ERROR, NOT_FOUND, etc.)")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(
        default=None, description="Список ошибок по полям (для валидации)"
    )


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Task with id 999 not found",
            "details": null
        }
    }
    """

    error: ErrorBody


class MessageResponse(BaseModel):
    """Успешная операция без данных, например {"message": "Logged out"}."""

    message: str
