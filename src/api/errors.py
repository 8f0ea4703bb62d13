"""
Обработчики ошибок (Exception Handlers) для API.

Все ошибки возвращаются в едином формате:
    {"error": {"code": "...", "message": "...", "details": [...] | null}}

Сервисы бросают ValueError с текстом бизнес-ошибки; роуты переводят его
в APIError через from_value_error(), а handler ниже - в JSON ответ.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class APIError(Exception):
    """
    Базовый класс для всех API ошибок.

    Использование:
        raise APIError(code="NOT_FOUND", message="Task not found", status_code=404)
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: list[dict] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.headers = headers
        super().__init__(message)


class NotFoundError(APIError):
    """Ресурс не найден или принадлежит другому пользователю (404)."""

    def __init__(self, message: str):
        super().__init__(
            code="NOT_FOUND", message=message, status_code=status.HTTP_404_NOT_FOUND
        )


class AlreadyExistsError(APIError):
    """Нарушена уникальность: email, имя категории/тега (400)."""

    def __init__(self, message: str):
        super().__init__(
            code="ALREADY_EXISTS", message=message, status_code=status.HTTP_400_BAD_REQUEST
        )


class ValidationError_(APIError):
    """
    Ошибка валидации бизнес-логики (400).

    Использование:
        raise ValidationError_("Passwords do not match")
    """

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class UnauthorizedError(APIError):
    """Нет токена, токен невалиден/просрочен или неверный пароль (401)."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )


def from_value_error(exc: ValueError) -> APIError:
    """
    Перевести бизнес-ошибку сервиса в HTTP ошибку по тексту сообщения.

    "... not found"      -> 404 NOT_FOUND
    "... already exists" -> 400 ALREADY_EXISTS
    всё остальное        -> 400 VALIDATION_ERROR

    Использование в роуте:
        try:
            task = await service.get_task(user.id, task_id)
        except ValueError as e:
            raise from_value_error(e) from e
    """
    message = str(exc)
    lowered = message.lower()
    if "not found" in lowered:
        return NotFoundError(message)
    if "already exists" in lowered:
        return AlreadyExistsError(message)
    return ValidationError_(message)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Преобразует APIError в единый формат ErrorResponse."""
    logger.warning(
        "API error",
        extra={"code": exc.code, "error_message": exc.message, "path": request.url.path},
    )

    details = None
    if exc.details:
        details = [ErrorDetail(field=d["field"], message=d["message"]) for d in exc.details]

    error_response = ErrorResponse(
        error=ErrorBody(code=exc.code, message=exc.message, details=details)
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(),
        headers=exc.headers,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Ошибки валидации Pydantic (422) в нашем формате.

    {"detail": [{"loc": ["body", "title"], "msg": "..."}]}
    превращается в
    {"error": {"code": "VALIDATION_ERROR", "details": [{"field": "title", ...}]}}
    """
    logger.warning("Request validation failed", extra={"path": request.url.path})

    details = []
    for error in exc.errors():
        field_path = error.get("loc", [])
        field_name = field_path[-1] if field_path else "unknown"
        if len(field_path) > 1 and field_path[0] == "body":
            field_name = ".".join(str(p) for p in field_path[1:])

        details.append(
            ErrorDetail(field=str(field_name), message=error.get("msg", "Invalid value"))
        )

    error_response = ErrorResponse(
        error=ErrorBody(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details=details,
        )
    )
    return JSONResponse(status_code=422, content=error_response.model_dump())


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Все остальные ошибки (500). Детали клиенту не показываем."""
    logger.error(f"Internal Error: {type(exc).__name__}: {exc}", exc_info=True)

    error_response = ErrorResponse(
        error=ErrorBody(code="INTERNAL_ERROR", message="Internal server error", details=None)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(),
    )


def register_error_handlers(app) -> None:
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py:
        from src.api.errors import register_error_handlers
        register_error_handlers(app)
    """
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    if not app.debug:
        app.add_exception_handler(Exception, generic_error_handler)

    logger.info("Error handlers registered")
