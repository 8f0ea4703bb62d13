"""
Состояние списка задач на клиенте.

Состояние - неизменяемое значение. Единственный способ его изменить:
    new_state = reduce(state, action)

reduce - чистая функция: не трогает старое состояние и не делает I/O.
Сетевые вызовы делает TodoApiClient, а их результаты приходят сюда
как действия (TasksLoaded, TaskUpserted, RequestFailed, ...).

Пример:
    state = TaskListState()
    state = reduce(state, SetFilters({"status": "pending"}))
    state = reduce(state, SetSort(SortOption.parse("priority", "desc")))
    visible = select_visible_tasks(state)
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, tzinfo
from typing import Any

from ..models import BulkOperation, TaskStatus, utc_now
from ..query import SortOption, TaskFilters, TaskStatistics, aggregate, filter_tasks, sort_tasks
from .models import Pagination, TaskItem


@dataclass(frozen=True)
class TaskListState:
    tasks: tuple[TaskItem, ...] = ()
    today_tasks: tuple[TaskItem, ...] = ()
    upcoming_tasks: tuple[TaskItem, ...] = ()
    overdue_tasks: tuple[TaskItem, ...] = ()
    selected_ids: tuple[int, ...] = ()
    current_task: TaskItem | None = None
    loading: bool = False
    error: str | None = None
    pagination: Pagination | None = None
    filters: TaskFilters = field(default_factory=TaskFilters)
    sort: SortOption | None = None
    search_query: str = ""


# ============================================================================
# ACTIONS
# ============================================================================


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class SetFilters:
    """Слить изменения с текущими фильтрами: {"status": "completed"}."""

    changes: dict[str, Any]


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class SetSort:
    sort: SortOption | None


@dataclass(frozen=True)
class ClearSort:
    pass


@dataclass(frozen=True)
class SetSearchQuery:
    query: str


@dataclass(frozen=True)
class ClearSearchQuery:
    pass


@dataclass(frozen=True)
class SelectTask:
    task_id: int


@dataclass(frozen=True)
class DeselectTask:
    task_id: int


@dataclass(frozen=True)
class SelectAllTasks:
    pass


@dataclass(frozen=True)
class DeselectAllTasks:
    pass


@dataclass(frozen=True)
class SetCurrentTask:
    task: TaskItem | None


@dataclass(frozen=True)
class ClearCurrentTask:
    pass


@dataclass(frozen=True)
class RequestStarted:
    pass


@dataclass(frozen=True)
class RequestFailed:
    message: str


@dataclass(frozen=True)
class TasksLoaded:
    tasks: tuple[TaskItem, ...]
    pagination: Pagination | None = None


@dataclass(frozen=True)
class DashboardLoaded:
    today: tuple[TaskItem, ...] = ()
    upcoming: tuple[TaskItem, ...] = ()
    overdue: tuple[TaskItem, ...] = ()


@dataclass(frozen=True)
class TaskUpserted:
    """Задача создана (добавляется в начало) или обновлена (заменяется везде)."""

    task: TaskItem


@dataclass(frozen=True)
class TaskRemoved:
    task_id: int


@dataclass(frozen=True)
class BulkApplied:
    """Сервер подтвердил массовую операцию для всех task_ids."""

    operation: BulkOperation
    task_ids: tuple[int, ...]
    status: TaskStatus | None = None
    category_id: int | None = None
    applied_at: datetime | None = None


# ============================================================================
# REDUCER
# ============================================================================

State = TaskListState
Handler = Callable[[State, Any], State]

_REDUCERS: dict[type, Handler] = {}


def _handles(action_type: type) -> Callable[[Handler], Handler]:
    def register(func: Handler) -> Handler:
        _REDUCERS[action_type] = func
        return func

    return register


def reduce(state: State, action: Any) -> State:
    """
    Применить действие к состоянию.

    Неизвестное действие возвращает состояние без изменений.
    """
    handler = _REDUCERS.get(type(action))
    return handler(state, action) if handler else state


def _without(tasks: Iterable[TaskItem], ids: set[int]) -> tuple[TaskItem, ...]:
    return tuple(task for task in tasks if task.id not in ids)


def _replace_task(tasks: Iterable[TaskItem], updated: TaskItem) -> tuple[TaskItem, ...]:
    return tuple(updated if task.id == updated.id else task for task in tasks)


@_handles(ClearError)
def _clear_error(state: State, action: ClearError) -> State:
    return replace(state, error=None)


@_handles(SetFilters)
def _set_filters(state: State, action: SetFilters) -> State:
    return replace(state, filters=state.filters.merge(**action.changes))


@_handles(ClearFilters)
def _clear_filters(state: State, action: ClearFilters) -> State:
    return replace(state, filters=TaskFilters())


@_handles(SetSort)
def _set_sort(state: State, action: SetSort) -> State:
    return replace(state, sort=action.sort)


@_handles(ClearSort)
def _clear_sort(state: State, action: ClearSort) -> State:
    return replace(state, sort=None)


@_handles(SetSearchQuery)
def _set_search(state: State, action: SetSearchQuery) -> State:
    return replace(state, search_query=action.query)


@_handles(ClearSearchQuery)
def _clear_search(state: State, action: ClearSearchQuery) -> State:
    return replace(state, search_query="")


@_handles(SelectTask)
def _select(state: State, action: SelectTask) -> State:
    if action.task_id in state.selected_ids:
        return state
    return replace(state, selected_ids=(*state.selected_ids, action.task_id))


@_handles(DeselectTask)
def _deselect(state: State, action: DeselectTask) -> State:
    return replace(
        state, selected_ids=tuple(i for i in state.selected_ids if i != action.task_id)
    )


@_handles(SelectAllTasks)
def _select_all(state: State, action: SelectAllTasks) -> State:
    return replace(state, selected_ids=tuple(task.id for task in state.tasks))


@_handles(DeselectAllTasks)
def _deselect_all(state: State, action: DeselectAllTasks) -> State:
    return replace(state, selected_ids=())


@_handles(SetCurrentTask)
def _set_current(state: State, action: SetCurrentTask) -> State:
    return replace(state, current_task=action.task)


@_handles(ClearCurrentTask)
def _clear_current(state: State, action: ClearCurrentTask) -> State:
    return replace(state, current_task=None)


@_handles(RequestStarted)
def _request_started(state: State, action: RequestStarted) -> State:
    return replace(state, loading=True, error=None)


@_handles(RequestFailed)
def _request_failed(state: State, action: RequestFailed) -> State:
    return replace(state, loading=False, error=action.message)


@_handles(TasksLoaded)
def _tasks_loaded(state: State, action: TasksLoaded) -> State:
    # Выбор сохраняется только для задач, которые остались в списке
    ids = {task.id for task in action.tasks}
    return replace(
        state,
        tasks=tuple(action.tasks),
        pagination=action.pagination,
        selected_ids=tuple(i for i in state.selected_ids if i in ids),
        loading=False,
    )


@_handles(DashboardLoaded)
def _dashboard_loaded(state: State, action: DashboardLoaded) -> State:
    return replace(
        state,
        today_tasks=tuple(action.today),
        upcoming_tasks=tuple(action.upcoming),
        overdue_tasks=tuple(action.overdue),
        loading=False,
    )


@_handles(TaskUpserted)
def _task_upserted(state: State, action: TaskUpserted) -> State:
    task = action.task
    if any(existing.id == task.id for existing in state.tasks):
        tasks = _replace_task(state.tasks, task)
    else:
        tasks = (task, *state.tasks)

    current = state.current_task
    if current is not None and current.id == task.id:
        current = task

    return replace(
        state,
        tasks=tasks,
        today_tasks=_replace_task(state.today_tasks, task),
        upcoming_tasks=_replace_task(state.upcoming_tasks, task),
        overdue_tasks=_replace_task(state.overdue_tasks, task),
        current_task=current,
        loading=False,
    )


@_handles(TaskRemoved)
def _task_removed(state: State, action: TaskRemoved) -> State:
    return _drop_tasks(state, {action.task_id})


def _drop_tasks(state: State, ids: set[int]) -> State:
    current = state.current_task
    return replace(
        state,
        tasks=_without(state.tasks, ids),
        today_tasks=_without(state.today_tasks, ids),
        upcoming_tasks=_without(state.upcoming_tasks, ids),
        overdue_tasks=_without(state.overdue_tasks, ids),
        selected_ids=tuple(i for i in state.selected_ids if i not in ids),
        current_task=None if current is not None and current.id in ids else current,
        loading=False,
    )


@_handles(BulkApplied)
def _bulk_applied(state: State, action: BulkApplied) -> State:
    ids = set(action.task_ids)
    if action.operation == BulkOperation.DELETE:
        return _drop_tasks(state, ids)

    if action.operation == BulkOperation.UPDATE_STATUS:
        if action.status is None:
            return state
        status = TaskStatus(action.status)
        completed_at = (action.applied_at or utc_now()) if status == TaskStatus.COMPLETED else None
        update: dict[str, Any] = {"status": status, "completed_at": completed_at}
    else:
        update = {"category_id": action.category_id}

    def change(task: TaskItem) -> TaskItem:
        if task.status == update.get("status"):
            return task
        return task.model_copy(update=update)

    def apply(tasks: tuple[TaskItem, ...]) -> tuple[TaskItem, ...]:
        return tuple(change(task) if task.id in ids else task for task in tasks)

    return replace(
        state,
        tasks=apply(state.tasks),
        today_tasks=apply(state.today_tasks),
        upcoming_tasks=apply(state.upcoming_tasks),
        overdue_tasks=apply(state.overdue_tasks),
        selected_ids=(),
        loading=False,
    )


# ============================================================================
# SELECTORS
# ============================================================================


def effective_filters(state: State) -> TaskFilters:
    """Фильтры с учётом строки поиска (она хранится отдельно)."""
    if state.search_query:
        return state.filters.merge(search=state.search_query)
    return state.filters


def select_visible_tasks(
    state: State, now: datetime | None = None, zone: tzinfo | None = None
) -> list[TaskItem]:
    """Задачи для отображения: фильтр -> сортировка."""
    visible = filter_tasks(state.tasks, effective_filters(state), now, zone)
    return sort_tasks(visible, state.sort)


def select_statistics(
    state: State, now: datetime | None = None, zone: tzinfo | None = None
) -> TaskStatistics:
    """Статистика по всему загруженному списку (без учёта фильтров)."""
    return aggregate(
        (task for task in state.tasks if task.status != TaskStatus.DELETED), now, zone
    )


def select_selected_tasks(state: State) -> list[TaskItem]:
    selected = set(state.selected_ids)
    return [task for task in state.tasks if task.id in selected]
