"""
Time helpers shared by filters and statistics.

Moments are compared in naive UTC. Calendar buckets (today, tomorrow) are
evaluated in the user's timezone, UTC when none is given.
"""

from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..models.base import utc_now

# Горизонт "недели" для фильтра week и счётчика upcoming
WEEK = timedelta(days=7)


def as_naive_utc(value: datetime) -> datetime:
    """
    Привести datetime к naive UTC.

    В БД даты хранятся naive (UTC), но клиент может прислать aware datetime.
    Сравнивать naive и aware нельзя, поэтому нормализуем всё к одному виду.
    """
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def resolve_now(now: datetime | None) -> datetime:
    """Момент вычисления: переданный явно (тесты) или текущий."""
    return as_naive_utc(now) if now is not None else utc_now()


def due_of(task) -> datetime | None:
    """Дедлайн задачи в naive UTC (или None)."""
    due = getattr(task, "due_date", None)
    if due is None:
        return None
    if not isinstance(due, datetime):
        # date без времени считаем началом дня
        due = datetime.combine(due, datetime.min.time())
    return as_naive_utc(due)


def resolve_zone(name: str | None) -> tzinfo:
    """Часовой пояс по имени IANA; UTC для пустого или неизвестного имени."""
    if not name:
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def is_known_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def local_date(value: datetime, zone: tzinfo | None = None) -> date:
    """Календарная дата naive-UTC момента в часовом поясе zone."""
    if zone is None:
        return value.date()
    return value.replace(tzinfo=UTC).astimezone(zone).date()


def same_day(value: datetime, day: date, zone: tzinfo | None = None) -> bool:
    return local_date(value, zone) == day
