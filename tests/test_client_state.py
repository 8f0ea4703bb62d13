"""Тесты клиентского состояния списка задач (reduce + селекторы)."""

import subprocess
import sys
from datetime import timedelta
from pathlib import Path

from src.client.models import Pagination, TaskItem
from src.client.state import (
    BulkApplied,
    ClearFilters,
    ClearSearchQuery,
    DashboardLoaded,
    DeselectAllTasks,
    DeselectTask,
    RequestFailed,
    RequestStarted,
    SelectAllTasks,
    SelectTask,
    SetCurrentTask,
    SetFilters,
    SetSearchQuery,
    SetSort,
    TaskListState,
    TaskRemoved,
    TasksLoaded,
    TaskUpserted,
    reduce,
    select_selected_tasks,
    select_statistics,
    select_visible_tasks,
)
from src.models import BulkOperation, TaskPriority, TaskStatus
from src.query import SortOption, TaskFilters
from tests.conftest import NOW


def item(id: int, **fields) -> TaskItem:
    fields.setdefault("title", f"Task {id}")
    fields.setdefault("created_at", NOW)
    return TaskItem(id=id, **fields)


def loaded(*tasks: TaskItem) -> TaskListState:
    return reduce(TaskListState(), TasksLoaded(tuple(tasks), Pagination(total=len(tasks))))


def test_unknown_action_returns_same_state():
    state = TaskListState()

    assert reduce(state, object()) is state


def test_reduce_does_not_mutate_previous_state():
    state = TaskListState()

    new_state = reduce(state, SetFilters({"status": "completed"}))

    assert state.filters == TaskFilters()
    assert new_state.filters.status == "completed"


def test_set_filters_merges_and_clear_resets():
    state = reduce(TaskListState(), SetFilters({"status": "pending"}))
    state = reduce(state, SetFilters({"priority": "high"}))

    assert state.filters == TaskFilters(status="pending", priority="high")
    assert reduce(state, ClearFilters()).filters == TaskFilters()


def test_set_filters_ignores_unknown_keys():
    state = reduce(TaskListState(), SetFilters({"status": "pending"}))

    new_state = reduce(state, SetFilters({"sort": "x", "color": "red"}))

    assert new_state == state
    assert reduce(state, SetFilters({"sort": "x", "priority": "low"})).filters == TaskFilters(
        status="pending", priority="low"
    )


def test_request_lifecycle():
    state = reduce(TaskListState(error="old"), RequestStarted())
    assert state.loading and state.error is None

    state = reduce(state, RequestFailed("Network error"))
    assert not state.loading
    assert state.error == "Network error"


def test_tasks_loaded_keeps_only_existing_selection():
    state = loaded(item(1), item(2))
    state = reduce(state, SelectTask(1))
    state = reduce(state, SelectTask(2))

    state = reduce(state, TasksLoaded((item(2), item(3))))

    assert state.selected_ids == (2,)


def test_selection():
    state = loaded(item(1), item(2), item(3))

    state = reduce(state, SelectTask(2))
    state = reduce(state, SelectTask(2))
    assert state.selected_ids == (2,)

    state = reduce(state, SelectAllTasks())
    assert state.selected_ids == (1, 2, 3)
    assert [task.id for task in select_selected_tasks(state)] == [1, 2, 3]

    state = reduce(state, DeselectTask(1))
    assert state.selected_ids == (2, 3)
    assert reduce(state, DeselectAllTasks()).selected_ids == ()


def test_task_upserted_prepends_new_and_replaces_existing():
    state = loaded(item(1), item(2))
    state = reduce(state, SetCurrentTask(item(2)))

    state = reduce(state, TaskUpserted(item(3)))
    assert [task.id for task in state.tasks] == [3, 1, 2]

    state = reduce(state, TaskUpserted(item(2, title="Renamed")))
    assert state.tasks[2].title == "Renamed"
    assert state.current_task.title == "Renamed"


def test_task_removed_clears_everywhere():
    state = loaded(item(1), item(2))
    state = reduce(state, DashboardLoaded(today=(item(1),), overdue=(item(1),)))
    state = reduce(state, SelectTask(1))
    state = reduce(state, SetCurrentTask(item(1)))

    state = reduce(state, TaskRemoved(1))

    assert [task.id for task in state.tasks] == [2]
    assert state.today_tasks == ()
    assert state.overdue_tasks == ()
    assert state.selected_ids == ()
    assert state.current_task is None


def test_bulk_delete_drops_tasks():
    state = loaded(item(1), item(2), item(3))

    state = reduce(state, BulkApplied(BulkOperation.DELETE, (1, 3)))

    assert [task.id for task in state.tasks] == [2]


def test_bulk_complete_sets_completed_at():
    state = loaded(item(1), item(2))
    state = reduce(state, SelectAllTasks())

    state = reduce(
        state,
        BulkApplied(
            BulkOperation.UPDATE_STATUS, (1,), status=TaskStatus.COMPLETED, applied_at=NOW
        ),
    )

    first, second = state.tasks
    assert first.status == TaskStatus.COMPLETED
    assert first.completed_at == NOW
    assert second.status == TaskStatus.PENDING
    assert state.selected_ids == ()


def test_bulk_move_category():
    state = loaded(item(1, category_id=1), item(2))

    state = reduce(state, BulkApplied(BulkOperation.MOVE_CATEGORY, (1, 2), category_id=7))

    assert [task.category_id for task in state.tasks] == [7, 7]


def test_visible_tasks_apply_filters_search_and_sort():
    state = loaded(
        item(1, title="Buy milk", priority=TaskPriority.LOW),
        item(2, title="Milk the cow", priority=TaskPriority.HIGH),
        item(3, title="Write report", priority=TaskPriority.HIGH),
    )
    state = reduce(state, SetSearchQuery("milk"))
    state = reduce(state, SetSort(SortOption.parse("priority", "desc")))

    assert [task.id for task in select_visible_tasks(state, NOW)] == [2, 1]

    state = reduce(state, ClearSearchQuery())
    state = reduce(state, SetFilters({"priority": "high"}))
    assert [task.id for task in select_visible_tasks(state, NOW)] == [2, 3]


def test_select_statistics():
    state = loaded(
        item(1, status=TaskStatus.COMPLETED, completed_at=NOW),
        item(2, due_date=NOW - timedelta(days=1)),
        item(3),
    )

    stats = select_statistics(state, NOW)

    assert stats.total_tasks == 3
    assert stats.overdue_tasks == 1
    assert stats.completion_rate == 33


def test_client_does_not_import_service_layer():
    """Клиент использует модели и query, но не сервисы с сессией БД."""
    code = (
        "import sys, src.client; "
        "sys.exit(any(name.startswith('src.services') for name in sys.modules))"
    )
    result = subprocess.run(
        [sys.executable, "-c", code], cwd=Path(__file__).resolve().parent.parent
    )

    assert result.returncode == 0
