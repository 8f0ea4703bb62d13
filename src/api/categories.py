"""API endpoints для работы с категориями."""

from fastapi import APIRouter, Depends, Response, status

from ..models import User
from ..services import CategoryService
from .dependencies import get_category_service, get_current_user
from .errors import from_value_error
from .schemas import CategoryCreate, CategoryResponse, CategoryUpdate, ErrorResponse

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse], summary="Категории пользователя")
async def list_categories(
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> list[CategoryResponse]:
    """Категории по алфавиту, с количеством неудалённых задач в каждой."""
    rows = await service.list_categories(current_user.id)
    return [
        CategoryResponse.model_validate(category).model_copy(update={"task_count": count})
        for category, count in rows
    ]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать категорию",
    responses={400: {"model": ErrorResponse, "description": "Имя занято или невалидно"}},
)
async def create_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """
    Пример запроса:
    ```json
    {"name": "Work", "color": "#10B981"}
    ```
    """
    try:
        category = await service.create_category(
            current_user.id, name=data.name, color=data.color, description=data.description
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    try:
        category = await service.get_category(current_user.id, category_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse, summary="Обновить категорию")
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    try:
        category = await service.update_category(
            current_user.id, category_id, **data.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить категорию",
    description="Задачи категории не удаляются, а остаются без категории.",
)
async def delete_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> Response:
    try:
        await service.delete_category(current_user.id, category_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
