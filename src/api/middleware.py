"""HTTP middleware for request logging and tracing."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import generate_request_id, get_logger, request_id_var, user_id_var

logger = get_logger("api.requests")

# Служебные пути не логируем, чтобы не засорять лог
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования HTTP запросов.

    Для каждого запроса:
    - генерирует request_id (или берёт из заголовка X-Request-ID клиента)
    - возвращает его в заголовке ответа X-Request-ID
    - пишет одну строку лога: метод, путь, статус, длительность, IP

    Пример лога (JSON):
    {
        "timestamp": "2026-10-19T12:00:00+00:00",
        "level": "WARNING",
        "logger": "api.requests",
        "message": "Request completed",
        "request_id": "abc-123",
        "extra": {
            "method": "GET",
            "path": "/api/v1/tasks",
            "status": 401,
            "duration_ms": 3,
            "client_ip": "127.0.0.1"
        }
    }
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        request_id_var.set(request_id)
        user_id_var.set(None)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
        }

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    **request_info,
                    "duration_ms": int((time.perf_counter() - start_time) * 1000),
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id

        if request.url.path not in QUIET_PATHS:
            log = logger.info if response.status_code < 400 else logger.warning
            log(
                "Request completed",
                extra={**request_info, "status": response.status_code, "duration_ms": duration_ms},
            )

        return response
