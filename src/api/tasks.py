"""
API endpoints для работы с задачами.

- CRUD (удаление мягкое)
- Список с фильтрацией, сортировкой и пагинацией
- Смена статуса, массовые операции
- Экспорт / импорт
"""

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import ValidationError

from ..models import User, utc_now
from ..query import SortOption, TaskFilters
from ..services import TaskService
from .dependencies import get_current_user, get_task_service
from .errors import from_value_error
from .schemas import (
    BulkTaskRequest,
    BulkTaskResponse,
    ErrorResponse,
    ImportErrorItem,
    TaskCreate,
    TaskExportResponse,
    TaskImportItem,
    TaskImportRequest,
    TaskImportResponse,
    TaskListResponse,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Задача не найдена"}}


# ============================================================================
# LIST TASKS (фильтры + сортировка + пагинация)
# ============================================================================


@router.get(
    "",
    response_model=TaskListResponse,
    summary="Получить задачи с фильтрами",
    description="""
    Все фильтры комбинируются через AND, теги - через OR.

    Некорректные значения фильтров (например status=foo) игнорируются,
    а не приводят к ошибке.
    """,
)
async def list_tasks(
    # Строки, а не enum: неизвестное значение = фильтр не задан
    status: str | None = Query(None, description="all | pending | completed"),
    priority: str | None = Query(None, description="all | low | medium | high"),
    category_id: str | None = Query(None, description="ID категории"),
    tags: list[str] = Query(default=[], description="Имя тега (можно повторять)"),
    due_date: str | None = Query(
        None, description="all | today | tomorrow | week | overdue"
    ),
    search: str | None = Query(None, description="Подстрока в названии или описании"),
    sort_by: str | None = Query(
        None, description="created_at | updated_at | due_date | priority | title"
    ),
    sort_direction: str | None = Query(None, description="asc | desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """
    Пример:
        GET /api/v1/tasks?status=pending&tags=work&tags=home&sort_by=priority&sort_direction=desc
    """
    filters = TaskFilters(
        status=status,
        priority=priority,
        category_id=category_id,
        tags=tuple(tags),
        due_date=due_date,
        search=search,
    )
    result = await service.list_tasks(
        current_user.id,
        filters=filters,
        sort=SortOption.parse(sort_by, sort_direction),
        page=page,
        limit=limit,
    )
    return TaskListResponse(
        items=[TaskResponse.model_validate(task) for task in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


# ============================================================================
# CREATE TASK
# ============================================================================


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    responses={400: {"model": ErrorResponse, "description": "Ошибка валидации"}},
)
async def create_task(
    data: TaskCreate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Создать задачу. Теги создаются автоматически, если их ещё нет.

    Пример запроса:
    ```json
    {"title": "Купить молоко", "priority": "low", "tags": ["shopping"]}
    ```
    """
    try:
        task = await service.create_task(
            current_user.id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            due_date=data.due_date,
            category_id=data.category_id,
            tag_names=data.tags,
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return TaskResponse.model_validate(task)


# ============================================================================
# BULK / EXPORT / IMPORT (до /{task_id}, чтобы пути не перехватывались)
# ============================================================================


@router.post(
    "/bulk",
    response_model=BulkTaskResponse,
    summary="Массовая операция над задачами",
    responses={
        400: {"model": ErrorResponse, "description": "Не хватает status/category_id"},
        404: {"model": ErrorResponse, "description": "Часть задач не найдена"},
    },
)
async def bulk_tasks(
    data: BulkTaskRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> BulkTaskResponse:
    """Всё или ничего: одна ненайденная задача отменяет всю операцию."""
    try:
        affected = await service.bulk_update(
            current_user.id,
            data.operation,
            data.task_ids,
            status=data.status,
            category_id=data.category_id,
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return BulkTaskResponse(operation=data.operation, affected=affected)


@router.get("/export", response_model=TaskExportResponse, summary="Экспорт задач в JSON")
async def export_tasks(
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskExportResponse:
    tasks = await service.export_tasks(current_user.id)
    return TaskExportResponse(
        exported_at=utc_now(),
        count=len(tasks),
        tasks=[TaskResponse.model_validate(task) for task in tasks],
    )


@router.post(
    "/import",
    response_model=TaskImportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Импорт задач из JSON",
)
async def import_tasks(
    data: TaskImportRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskImportResponse:
    """
    Импортировать задачи. Невалидные элементы пропускаются,
    а их ошибки возвращаются с индексом во входном списке.
    """
    errors: list[ImportErrorItem] = []
    valid: list[tuple[int, dict]] = []

    for index, raw in enumerate(data.tasks):
        try:
            item = TaskImportItem.model_validate(raw)
        except ValidationError as e:
            message = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            errors.append(ImportErrorItem(index=index, message=message))
            continue

        fields = item.model_dump()
        fields["tag_names"] = fields.pop("tags")
        valid.append((index, fields))

    result = await service.import_tasks(current_user.id, valid)
    errors.extend(ImportErrorItem(index=e.index, message=e.message) for e in result.errors)
    errors.sort(key=lambda error: error.index)

    return TaskImportResponse(
        imported=len(result.imported),
        failed=len(errors),
        tasks=[TaskResponse.model_validate(task) for task in result.imported],
        errors=errors,
    )


# ============================================================================
# SINGLE TASK
# ============================================================================


@router.get("/{task_id}", response_model=TaskResponse, responses=NOT_FOUND)
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    try:
        task = await service.get_task(current_user.id, task_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return TaskResponse.model_validate(task)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Обновить задачу",
    responses={**NOT_FOUND, 400: {"model": ErrorResponse, "description": "Ошибка валидации"}},
)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Частичное обновление: меняются только переданные поля.

    `{"due_date": null}` снимает дедлайн, `{"category_id": null}` - категорию.
    """
    try:
        task = await service.update_task(
            current_user.id, task_id, **data.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}/status", response_model=TaskResponse, responses=NOT_FOUND)
async def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Отметить задачу выполненной (completed) или вернуть в работу (pending)."""
    try:
        task = await service.set_status(current_user.id, task_id, data.status)
    except ValueError as e:
        raise from_value_error(e) from e
    return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить задачу",
    responses=NOT_FOUND,
)
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> Response:
    """Мягкое удаление: задача пропадает из всех списков и статистики."""
    try:
        await service.delete_task(current_user.id, task_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
