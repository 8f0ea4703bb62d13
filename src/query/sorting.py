"""
Сортировка задач: построение ключа/компаратора по спецификации сортировки.

Поддерживаемые поля: created_at, updated_at, due_date, priority, title.
Задачи без дедлайна при сортировке по due_date считаются "самыми ранними"
(дата 1970-01-01), поэтому при ASC оказываются в начале.
"""

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Any

from ..models import TaskPriority
from .dates import as_naive_utc, due_of

EPOCH = datetime(1970, 1, 1)

# Ранг приоритета: чем выше, тем важнее. Неизвестный приоритет = 0
PRIORITY_RANK: dict[str, int] = {
    TaskPriority.HIGH.value: 3,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 1,
}


class SortField(str, enum.Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


# Фронтенд присылает camelCase
_FIELD_ALIASES = {
    "createdAt": SortField.CREATED_AT,
    "updatedAt": SortField.UPDATED_AT,
    "dueDate": SortField.DUE_DATE,
}


def _timestamp(value: datetime | None) -> datetime:
    return as_naive_utc(value) if value is not None else EPOCH


def _priority_rank(task: Any) -> int:
    priority = getattr(task.priority, "value", task.priority)
    return PRIORITY_RANK.get(priority, 0)


SORT_KEYS: dict[SortField, Callable[[Any], Any]] = {
    SortField.CREATED_AT: lambda task: _timestamp(task.created_at),
    SortField.UPDATED_AT: lambda task: _timestamp(task.updated_at),
    SortField.DUE_DATE: lambda task: due_of(task) or EPOCH,
    SortField.PRIORITY: _priority_rank,
    SortField.TITLE: lambda task: (task.title or "").lower(),
}


@dataclass(frozen=True)
class SortOption:
    """
    Спецификация сортировки: поле + направление.

    Пример:
        option = SortOption.parse("priority", "desc")
        ordered = sort_tasks(tasks, option)
    """

    field: SortField
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, field: Any, direction: Any = None) -> "SortOption | None":
        """
        Разобрать "сырые" значения из запроса.

        Неизвестное поле -> None (сортировка не применяется),
        неизвестное направление -> ASC.
        """
        if field is None or field == "":
            return None
        if isinstance(field, SortField):
            sort_field = field
        else:
            raw = str(field).strip()
            sort_field = _FIELD_ALIASES.get(raw)
            if sort_field is None:
                try:
                    sort_field = SortField(raw.lower())
                except ValueError:
                    return None

        try:
            sort_direction = SortDirection(str(getattr(direction, "value", direction)).lower())
        except ValueError:
            sort_direction = SortDirection.ASC

        return cls(field=sort_field, direction=sort_direction)

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


def build_sort_key(field: SortField) -> Callable[[Any], Any]:
    """Ключ сортировки для поля."""
    return SORT_KEYS[field]


def build_comparator(option: SortOption) -> Callable[[Any, Any], int]:
    """
    Построить компаратор (a, b) -> -1/0/1.

    DESC - зеркальное отражение ASC. Равные по ключу задачи дают 0.
    """
    key = build_sort_key(option.field)
    sign = -1 if option.descending else 1

    def compare(a: Any, b: Any) -> int:
        left, right = key(a), key(b)
        if left < right:
            return -sign
        if left > right:
            return sign
        return 0

    return compare


def sort_tasks(tasks: Iterable[Any], option: SortOption | None) -> list[Any]:
    """
    Отсортировать задачи (стабильно) и вернуть новый список.

    Без option порядок сохраняется как есть.
    """
    items = list(tasks)
    if option is None:
        return items
    return sorted(items, key=cmp_to_key(build_comparator(option)))
