"""
Фильтрация задач: построение предиката по спецификации фильтра.

Спецификация фильтра (TaskFilters) - набор независимых опциональных полей:
status, priority, category_id, tags, due_date (bucket), search.

Правила:
- Все поля объединяются через AND
- tags - через OR (достаточно одного совпавшего тега)
- search - подстрока в title ИЛИ description, без учёта регистра
- Удалённые задачи (status=deleted) не проходят никогда
- Неизвестные значения (status="foo", category_id="abc") трактуются
  как отсутствие фильтра: это фильтр для UI, а не валидатор запроса
"""

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta, tzinfo
from typing import Any, TypeVar

from ..models import TaskStatus
from .dates import WEEK, due_of, local_date, resolve_now, same_day

E = TypeVar("E", bound=enum.Enum)

TaskPredicate = Callable[[Any], bool]


class StatusFilter(str, enum.Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


class PriorityFilter(str, enum.Enum):
    ALL = "all"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DueDateBucket(str, enum.Enum):
    """Временные окна для фильтра по дедлайну."""

    ALL = "all"
    TODAY = "today"
    TOMORROW = "tomorrow"
    WEEK = "week"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class TaskFilters:
    """
    Спецификация фильтра в "сыром" виде, как пришла от клиента.

    Значения не валидируются при создании: разбор происходит в build_predicate,
    и всё непонятное молча игнорируется.

    Пример:
        filters = TaskFilters(status="pending", tags=("work",), due_date="week")
        visible = filter_tasks(tasks, filters)
    """

    status: str | None = None
    priority: str | None = None
    category_id: int | str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    due_date: str | None = None
    search: str | None = None

    def merge(self, **changes: Any) -> "TaskFilters":
        """
        Вернуть копию с изменёнными полями (аналог {...filters, ...payload}).

        Ключи, которых нет среди полей фильтра, отбрасываются.
        """
        known = {f.name for f in fields(self)}
        changes = {key: value for key, value in changes.items() if key in known}
        if "tags" in changes and changes["tags"] is not None:
            changes["tags"] = tuple(changes["tags"])
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        return self == TaskFilters()


def parse_enum(enum_cls: type[E], raw: Any) -> E | None:
    """Разобрать значение перечисления; None для пустого или неизвестного."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        return None


def parse_category_id(raw: Any) -> int | None:
    """Идентификатор категории или None, если он отсутствует/некорректен."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def tag_names(task: Any) -> set[str]:
    """Имена тегов задачи (теги могут быть ORM-объектами, схемами или строками)."""
    return {getattr(tag, "name", tag) for tag in (getattr(task, "tags", None) or [])}


def _bucket_check(bucket: DueDateBucket, now: datetime, zone: tzinfo | None) -> TaskPredicate:
    today = local_date(now, zone)
    tomorrow = today + timedelta(days=1)
    week_end = now + WEEK

    def check(task: Any) -> bool:
        due = due_of(task)
        if due is None:
            return False
        if bucket is DueDateBucket.TODAY:
            return same_day(due, today, zone)
        if bucket is DueDateBucket.TOMORROW:
            return same_day(due, tomorrow, zone)
        if bucket is DueDateBucket.WEEK:
            # Верхняя граница только сверху: просроченные задачи тоже попадают
            return due <= week_end
        return due < now  # OVERDUE

    return check


def build_predicate(
    filters: TaskFilters | None,
    now: datetime | None = None,
    zone: tzinfo | None = None,
) -> TaskPredicate:
    """
    Построить предикат "задача проходит фильтр".

    Args:
        filters: Спецификация фильтра (None - только исключить удалённые)
        now: Момент, относительно которого считаются due-date окна
        zone: Часовой пояс пользователя для окон today/tomorrow (None - UTC)

    Returns:
        Функция task -> bool без побочных эффектов
    """
    filters = filters or TaskFilters()
    now = resolve_now(now)

    checks: list[TaskPredicate] = [
        lambda task: _enum_value(task.status) != TaskStatus.DELETED.value
    ]

    status = parse_enum(StatusFilter, filters.status)
    if status is not None and status is not StatusFilter.ALL:
        checks.append(lambda task: _enum_value(task.status) == status.value)

    priority = parse_enum(PriorityFilter, filters.priority)
    if priority is not None and priority is not PriorityFilter.ALL:
        checks.append(lambda task: _enum_value(task.priority) == priority.value)

    category_id = parse_category_id(filters.category_id)
    if category_id is not None:
        checks.append(lambda task: getattr(task, "category_id", None) == category_id)

    wanted_tags = {tag for tag in (filters.tags or ()) if tag}
    if wanted_tags:
        checks.append(lambda task: not wanted_tags.isdisjoint(tag_names(task)))

    bucket = parse_enum(DueDateBucket, filters.due_date)
    if bucket is not None and bucket is not DueDateBucket.ALL:
        checks.append(_bucket_check(bucket, now, zone))

    term = (filters.search or "").strip().lower()
    if term:

        def matches_search(task: Any) -> bool:
            title = (task.title or "").lower()
            description = (getattr(task, "description", None) or "").lower()
            return term in title or term in description

        checks.append(matches_search)

    return lambda task: all(check(task) for check in checks)


def filter_tasks(
    tasks: Iterable[Any],
    filters: TaskFilters | None,
    now: datetime | None = None,
    zone: tzinfo | None = None,
) -> list[Any]:
    """Отфильтровать задачи, сохраняя исходный порядок."""
    predicate = build_predicate(filters, now, zone)
    return [task for task in tasks if predicate(task)]
