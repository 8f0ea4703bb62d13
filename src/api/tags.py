"""
API endpoints для работы с тегами.

Тег, которым помечена хотя бы одна задача, удалить нельзя (400).
"""

from fastapi import APIRouter, Depends, Response, status

from ..models import User
from ..services import TagService
from .dependencies import get_current_user, get_tag_service
from .errors import from_value_error
from .schemas import ErrorResponse, TagCreate, TagResponse, TagUpdate

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagResponse], summary="Теги пользователя")
async def list_tags(
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    rows = await service.list_tags(current_user.id)
    return [
        TagResponse.model_validate(tag).model_copy(update={"usage_count": count})
        for tag, count in rows
    ]


@router.post(
    "",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать тег",
    responses={400: {"model": ErrorResponse, "description": "Тег уже существует"}},
)
async def create_tag(
    data: TagCreate,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """
    Пример запроса:
    ```json
    {"name": "urgent", "color": "#EF4444"}
    ```
    """
    try:
        tag = await service.create_tag(current_user.id, name=data.name, color=data.color)
    except ValueError as e:
        raise from_value_error(e) from e
    return TagResponse.model_validate(tag)


@router.put("/{tag_id}", response_model=TagResponse, summary="Переименовать/перекрасить тег")
async def update_tag(
    tag_id: int,
    data: TagUpdate,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    try:
        tag = await service.update_tag(
            current_user.id, tag_id, **data.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return TagResponse.model_validate(tag)


@router.delete(
    "/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить тег",
    responses={400: {"model": ErrorResponse, "description": "Тег используется задачами"}},
)
async def delete_tag(
    tag_id: int,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> Response:
    try:
        await service.delete_tag(current_user.id, tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
