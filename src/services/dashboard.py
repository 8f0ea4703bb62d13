"""Dashboard service: statistics and due-date views over a user's tasks."""

from collections.abc import Callable
from datetime import datetime, tzinfo
from functools import partial
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Task
from ..query import (
    ActivitySummary,
    SortDirection,
    SortField,
    SortOption,
    TaskStatistics,
    aggregate,
    is_due_today,
    is_overdue,
    is_upcoming,
    sort_tasks,
    summarize_activity,
)
from ..query.dates import resolve_now, resolve_zone
from ..repositories import TaskRepository, UserRepository

BY_DUE_DATE = SortOption(SortField.DUE_DATE, SortDirection.ASC)


class DashboardService:
    """
    Сервис дашборда.

    Все значения вычисляются на лету из полного списка неудалённых
    задач пользователя: отдельных таблиц со статистикой нет.
    Календарные сутки "сегодня" считаются в часовом поясе из настроек.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.task_repo = TaskRepository(db)
        self.user_repo = UserRepository(db)

    async def _zone(self, user_id: int) -> tzinfo:
        return resolve_zone(await self.user_repo.get_timezone(user_id))

    async def get_statistics(self, user_id: int, now: datetime | None = None) -> TaskStatistics:
        """
        Сводные счётчики (total/completed/pending/overdue/today/upcoming, completion rate).

        Пример:
            stats = await service.get_statistics(user.id)
            print(f"{stats.completion_rate}% выполнено")
        """
        tasks = await self.task_repo.list_active(user_id)
        return aggregate(tasks, now, await self._zone(user_id))

    async def _bucket(
        self, user_id: int, check: Callable[[Any, datetime], bool], now: datetime | None
    ) -> list[Task]:
        now = resolve_now(now)
        tasks = await self.task_repo.list_active(user_id)
        return sort_tasks([task for task in tasks if check(task, now)], BY_DUE_DATE)

    async def get_today_tasks(self, user_id: int, now: datetime | None = None) -> list[Task]:
        """Незавершённые задачи с дедлайном сегодня, по возрастанию дедлайна."""
        zone = await self._zone(user_id)
        return await self._bucket(user_id, partial(is_due_today, zone=zone), now)

    async def get_upcoming_tasks(self, user_id: int, now: datetime | None = None) -> list[Task]:
        """Незавершённые задачи с дедлайном в ближайшие 7 дней."""
        return await self._bucket(user_id, is_upcoming, now)

    async def get_overdue_tasks(self, user_id: int, now: datetime | None = None) -> list[Task]:
        """Просроченные незавершённые задачи (самые старые первыми)."""
        return await self._bucket(user_id, is_overdue, now)

    async def get_activity(self, user_id: int, now: datetime | None = None) -> ActivitySummary:
        """Лента: задачи за 30 дней (не больше 10) + счётчики за неделю."""
        tasks = await self.task_repo.list_active(user_id)
        return summarize_activity(tasks, now)
