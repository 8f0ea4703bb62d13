"""API endpoints дашборда: статистика и выборки по дедлайнам."""

from fastapi import APIRouter, Depends

from ..models import User
from ..services import DashboardService
from .dependencies import get_current_user, get_dashboard_service
from .schemas import ActivityResponse, DashboardStatistics, TaskResponse

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/statistics", response_model=DashboardStatistics, summary="Сводная статистика")
async def get_statistics(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardStatistics:
    """
    Счётчики по неудалённым задачам пользователя.

    Пример ответа:
    ```json
    {"total_tasks": 3, "completed_tasks": 1, "pending_tasks": 2,
     "overdue_tasks": 1, "today_tasks": 0, "upcoming_tasks": 0,
     "completion_rate": 33}
    ```
    """
    stats = await service.get_statistics(current_user.id)
    return DashboardStatistics.model_validate(stats)


@router.get("/today", response_model=list[TaskResponse], summary="Задачи на сегодня")
async def get_today_tasks(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> list[TaskResponse]:
    tasks = await service.get_today_tasks(current_user.id)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/upcoming", response_model=list[TaskResponse], summary="Задачи на 7 дней")
async def get_upcoming_tasks(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> list[TaskResponse]:
    tasks = await service.get_upcoming_tasks(current_user.id)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/overdue", response_model=list[TaskResponse], summary="Просроченные задачи")
async def get_overdue_tasks(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> list[TaskResponse]:
    tasks = await service.get_overdue_tasks(current_user.id)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/activity", response_model=ActivityResponse, summary="Недавняя активность")
async def get_activity(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> ActivityResponse:
    activity = await service.get_activity(current_user.id)
    return ActivityResponse(
        recent_tasks=[TaskResponse.model_validate(task) for task in activity.recent_tasks],
        created_this_week=activity.created_this_week,
        completed_this_week=activity.completed_this_week,
    )
