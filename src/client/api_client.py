"""
HTTP клиент Todo API (httpx.AsyncClient).

Политика авторизации:
1. Каждый запрос уходит с заголовком Authorization: Bearer <access_token>
2. На 401 клиент ОДИН раз вызывает POST /auth/refresh
3. При успехе исходный запрос повторяется ОДИН раз с новым токеном
4. Если refresh не удался (или повтор снова 401) - токены удаляются,
   поднимается SessionExpiredError. Никаких циклов повторов.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.logging import get_logger
from ..models import BulkOperation, TaskStatus
from ..query import TaskFilters
from ..query.sorting import SortOption
from .models import TaskItem, TaskPageResult

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"
SESSION_EXPIRED_MESSAGE = "Session expired, please sign in again"


class ApiError(Exception):
    """
    Неуспешный ответ API (кроме 401) или сетевая ошибка.

    message берётся из тела {"error": {"message": ...}}, чтобы его
    можно было показать пользователю как есть.
    """

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class SessionExpiredError(Exception):
    """Токены больше не действуют: пользователь должен войти заново."""

    def __init__(self, message: str = SESSION_EXPIRED_MESSAGE):
        self.message = message
        super().__init__(message)


@dataclass
class TokenStore:
    """Хранилище пары токенов клиента (в памяти)."""

    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def update(self, payload: dict[str, Any]) -> None:
        """Сохранить токены из ответа login/register/refresh."""
        self.access_token = payload["access_token"]
        self.refresh_token = payload.get("refresh_token", self.refresh_token)

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        return ApiError(
            error.get("message") or response.reason_phrase,
            status_code=response.status_code,
            code=error.get("code"),
        )
    return ApiError(
        f"Request failed with status {response.status_code}",
        status_code=response.status_code,
    )


class TodoApiClient:
    """
    Асинхронный клиент Todo API.

    Пример:
        async with TodoApiClient("http://localhost:8000/api/v1") as api:
            await api.login("anna@example.com", "s3cret-pass")
            page = await api.list_tasks(TaskFilters(status="pending"))
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        tokens: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
        on_session_expired: Callable[[], None] | None = None,
    ):
        self.tokens = tokens or TokenStore()
        self.on_session_expired = on_session_expired
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        # Один refresh на несколько одновременных 401
        self._refresh_lock = asyncio.Lock()

    async def __aenter__(self) -> "TodoApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ========================================================================
    # TRANSPORT
    # ========================================================================

    async def _send(
        self,
        method: str,
        path: str,
        token: str | None,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            return await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning("API request failed", extra={"method": method, "path": path})
            raise ApiError(f"Network error: {e}") from e

    async def _refresh(self, failed_token: str | None) -> bool:
        """
        Обновить access токен. Возвращает False, если refresh невозможен.

        Если пока мы ждали lock, токен уже обновил другой запрос,
        повторно на сервер не ходим.
        """
        async with self._refresh_lock:
            if self.tokens.access_token and self.tokens.access_token != failed_token:
                return True
            if not self.tokens.refresh_token:
                return False

            try:
                response = await self._send(
                    "POST",
                    "/auth/refresh",
                    token=None,
                    json={"refresh_token": self.tokens.refresh_token},
                )
                if response.status_code != 200:
                    logger.info("Token refresh rejected", extra={"status": response.status_code})
                    return False
                self.tokens.update(response.json())
            except (ApiError, ValueError, KeyError, TypeError):
                # Сеть или битое тело ответа: refresh не удался
                logger.warning("Token refresh failed", exc_info=True)
                return False
            return True

    def _expire_session(self) -> SessionExpiredError:
        self.tokens.clear()
        if self.on_session_expired is not None:
            self.on_session_expired()
        return SessionExpiredError()

    async def request(self, method: str, path: str, auth: bool = True, **kwargs: Any) -> Any:
        """
        Выполнить запрос и вернуть JSON тела (None для 204).

        Raises:
            SessionExpiredError: 401 и refresh/повтор не помогли
            ApiError: любая другая ошибка (4xx/5xx, сеть)
        """
        token = self.tokens.access_token if auth else None
        response = await self._send(method, path, token, **kwargs)

        if response.status_code == 401 and auth:
            if not await self._refresh(token):
                raise self._expire_session()
            response = await self._send(method, path, self.tokens.access_token, **kwargs)
            if response.status_code == 401:
                raise self._expire_session()

        if response.is_error:
            raise _error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ========================================================================
    # AUTH
    # ========================================================================

    async def register(
        self, name: str, email: str, password: str, confirm_password: str | None = None
    ) -> dict[str, Any]:
        data = await self.request(
            "POST",
            "/auth/register",
            auth=False,
            json={
                "name": name,
                "email": email,
                "password": password,
                "confirm_password": password if confirm_password is None else confirm_password,
            },
        )
        self.tokens.update(data)
        return data["user"]

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Войти и сохранить токены. Неверный пароль - ApiError(401)."""
        response = await self._send(
            "POST", "/auth/login", token=None, json={"email": email, "password": password}
        )
        if response.is_error:
            raise _error_from_response(response)
        data = response.json()
        self.tokens.update(data)
        return data["user"]

    async def logout(self) -> None:
        try:
            await self.request("POST", "/auth/logout", auth=False)
        finally:
            self.tokens.clear()

    # ========================================================================
    # TASKS
    # ========================================================================

    async def list_tasks(
        self,
        filters: TaskFilters | None = None,
        sort: SortOption | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> TaskPageResult:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if filters is not None:
            for name in ("status", "priority", "category_id", "due_date", "search"):
                value = getattr(filters, name)
                if value not in (None, ""):
                    params[name] = value
            if filters.tags:
                params["tags"] = list(filters.tags)
        if sort is not None:
            params["sort_by"] = sort.field.value
            params["sort_direction"] = sort.direction.value

        data = await self.request("GET", "/tasks", params=params)
        return TaskPageResult.model_validate(data)

    async def get_task(self, task_id: int) -> TaskItem:
        return TaskItem.model_validate(await self.request("GET", f"/tasks/{task_id}"))

    async def create_task(self, **fields: Any) -> TaskItem:
        data = await self.request("POST", "/tasks", json=_jsonable(fields))
        return TaskItem.model_validate(data)

    async def update_task(self, task_id: int, **changes: Any) -> TaskItem:
        data = await self.request("PUT", f"/tasks/{task_id}", json=_jsonable(changes))
        return TaskItem.model_validate(data)

    async def set_task_status(self, task_id: int, status: TaskStatus | str) -> TaskItem:
        data = await self.request(
            "PATCH", f"/tasks/{task_id}/status", json={"status": TaskStatus(status).value}
        )
        return TaskItem.model_validate(data)

    async def delete_task(self, task_id: int) -> None:
        await self.request("DELETE", f"/tasks/{task_id}")

    async def bulk(
        self,
        operation: BulkOperation | str,
        task_ids: list[int],
        status: TaskStatus | str | None = None,
        category_id: int | None = None,
    ) -> int:
        """Массовая операция. Возвращает количество изменённых задач."""
        payload: dict[str, Any] = {
            "operation": BulkOperation(operation).value,
            "task_ids": list(task_ids),
        }
        if status is not None:
            payload["status"] = TaskStatus(status).value
        if category_id is not None:
            payload["category_id"] = category_id
        data = await self.request("POST", "/tasks/bulk", json=payload)
        return data["affected"]

    # ========================================================================
    # CATEGORIES / TAGS / DASHBOARD
    # ========================================================================

    async def list_categories(self) -> list[dict[str, Any]]:
        return await self.request("GET", "/categories")

    async def create_category(self, name: str, **fields: Any) -> dict[str, Any]:
        return await self.request("POST", "/categories", json={"name": name, **fields})

    async def list_tags(self) -> list[dict[str, Any]]:
        return await self.request("GET", "/tags")

    async def create_tag(self, name: str, color: str | None = None) -> dict[str, Any]:
        payload = {"name": name} if color is None else {"name": name, "color": color}
        return await self.request("POST", "/tags", json=payload)

    async def get_statistics(self) -> dict[str, int]:
        return await self.request("GET", "/dashboard/statistics")

    async def get_dashboard_tasks(self, bucket: str) -> list[TaskItem]:
        """bucket: today | upcoming | overdue."""
        data = await self.request("GET", f"/dashboard/{bucket}")
        return [TaskItem.model_validate(item) for item in data]


def _jsonable(fields: dict[str, Any]) -> dict[str, Any]:
    """Привести datetime/enum к JSON-совместимым значениям."""
    result = {}
    for key, value in fields.items():
        if hasattr(value, "isoformat"):
            value = value.isoformat()
        elif hasattr(value, "value"):
            value = value.value
        result[key] = value
    return result
