"""Aggregate statistics over a user's task collection (dashboard)."""

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any

from ..models import TaskStatus
from .dates import WEEK, as_naive_utc, due_of, local_date, resolve_now, same_day
from .sorting import EPOCH, SortDirection, SortField, SortOption, sort_tasks

RECENT_ACTIVITY_DAYS = 30
RECENT_ACTIVITY_LIMIT = 10


def _status(task: Any) -> str:
    return getattr(task.status, "value", task.status)


def _created(task: Any) -> datetime:
    created = getattr(task, "created_at", None)
    return as_naive_utc(created) if created is not None else EPOCH


def is_pending(task: Any) -> bool:
    return _status(task) == TaskStatus.PENDING.value


def is_completed(task: Any) -> bool:
    return _status(task) == TaskStatus.COMPLETED.value


def is_overdue(task: Any, now: datetime | None = None) -> bool:
    """Незавершённая задача с дедлайном строго в прошлом."""
    due = due_of(task)
    return is_pending(task) and due is not None and due < resolve_now(now)


def is_due_today(task: Any, now: datetime | None = None, zone: tzinfo | None = None) -> bool:
    """Незавершённая задача с дедлайном в текущие календарные сутки пользователя."""
    due = due_of(task)
    if not is_pending(task) or due is None:
        return False
    return same_day(due, local_date(resolve_now(now), zone), zone)


def is_upcoming(task: Any, now: datetime | None = None) -> bool:
    """Незавершённая задача с дедлайном строго после now, но не позже now + 7 дней."""
    due = due_of(task)
    if not is_pending(task) or due is None:
        return False
    now = resolve_now(now)
    return now < due <= now + WEEK


def completion_rate(completed: int, total: int) -> int:
    """Процент выполненных, округлённый до целого (0.5 вверх). 0 для пустого списка."""
    if total <= 0:
        return 0
    # round() в Python банковское, а нам нужно 12.5 -> 13
    return int(completed * 100 / total + 0.5)


@dataclass(frozen=True)
class TaskStatistics:
    """
    Сводка по задачам пользователя.

    Инварианты:
    - completed_tasks + pending_tasks <= total_tasks
      (равенство, если во входе нет удалённых задач)
    - overdue/today/upcoming считаются только по pending задачам
    - 0 <= completion_rate <= 100
    """

    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    overdue_tasks: int = 0
    today_tasks: int = 0
    upcoming_tasks: int = 0
    completion_rate: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def aggregate(
    tasks: Iterable[Any], now: datetime | None = None, zone: tzinfo | None = None
) -> TaskStatistics:
    """
    Посчитать статистику за один проход.

    Args:
        tasks: Задачи пользователя (обычно уже без удалённых)
        now: Момент вычисления, по умолчанию текущее время UTC
        zone: Часовой пояс пользователя для счётчика today (None - UTC)

    Returns:
        TaskStatistics
    """
    now = resolve_now(now)
    today = local_date(now, zone)
    week_end = now + WEEK

    total = completed = pending = overdue = due_today = upcoming = 0
    for task in tasks:
        total += 1
        if is_completed(task):
            completed += 1
            continue
        if not is_pending(task):
            continue

        pending += 1
        due = due_of(task)
        if due is None:
            continue
        if due < now:
            overdue += 1
        elif now < due <= week_end:
            upcoming += 1
        if same_day(due, today, zone):
            due_today += 1

    return TaskStatistics(
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=pending,
        overdue_tasks=overdue,
        today_tasks=due_today,
        upcoming_tasks=upcoming,
        completion_rate=completion_rate(completed, total),
    )


@dataclass(frozen=True)
class ActivitySummary:
    """Активность за последние дни: свежие задачи и счётчики за неделю."""

    recent_tasks: tuple[Any, ...]
    created_this_week: int
    completed_this_week: int


def summarize_activity(
    tasks: Iterable[Any],
    now: datetime | None = None,
    days: int = RECENT_ACTIVITY_DAYS,
    limit: int = RECENT_ACTIVITY_LIMIT,
) -> ActivitySummary:
    """
    Собрать ленту активности.

    recent_tasks - задачи, созданные за последние `days` дней,
    от новых к старым, не больше `limit` штук.
    """
    now = resolve_now(now)
    since = now - timedelta(days=days)
    week_ago = now - WEEK

    items = list(tasks)
    recent = [task for task in items if _created(task) >= since]
    recent = sort_tasks(recent, SortOption(SortField.CREATED_AT, SortDirection.DESC))

    created_this_week = sum(1 for task in items if _created(task) >= week_ago)
    completed_this_week = sum(
        1
        for task in items
        if is_completed(task)
        and getattr(task, "completed_at", None) is not None
        and as_naive_utc(task.completed_at) >= week_ago
    )

    return ActivitySummary(
        recent_tasks=tuple(recent[:limit]),
        created_this_week=created_this_week,
        completed_this_week=completed_this_week,
    )
