"""
Тесты статистики dashboard.

Проверяем:
- Счётчики total/completed/pending/overdue/today/upcoming
- completion_rate с округлением 0.5 вверх
- Граница upcoming: строго после now и не позже now + 7 дней
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from src.query import (
    aggregate,
    completion_rate,
    is_due_today,
    is_overdue,
    is_upcoming,
    summarize_activity,
)
from tests.conftest import NOW


def test_empty_collection():
    stats = aggregate([], NOW)

    assert stats.total_tasks == 0
    assert stats.completion_rate == 0


def test_one_of_three_completed(make_task):
    """1 из 3 выполнена, одна просрочена, одна на сегодня."""
    tasks = [
        make_task(1, status="completed", completed_at=NOW),
        make_task(2, due_date=NOW - timedelta(days=1)),
        make_task(3, due_date=NOW + timedelta(hours=3)),
    ]

    stats = aggregate(tasks, NOW)

    assert stats.total_tasks == 3
    assert stats.completed_tasks == 1
    assert stats.pending_tasks == 2
    assert stats.overdue_tasks == 1
    assert stats.today_tasks == 1
    assert stats.upcoming_tasks == 1
    assert stats.completion_rate == 33


def test_today_counter_uses_user_timezone(make_task):
    tasks = [
        make_task(1, due_date=datetime(2026, 3, 9, 20, 0)),
        make_task(2, due_date=datetime(2026, 3, 10, 20, 0)),
    ]

    vladivostok = ZoneInfo("Asia/Vladivostok")
    early, late = tasks

    assert not is_due_today(early, NOW) and is_due_today(late, NOW)
    assert is_due_today(early, NOW, vladivostok) and not is_due_today(late, NOW, vladivostok)

    stats = aggregate(tasks, NOW, vladivostok)
    assert stats.today_tasks == 1
    assert stats.overdue_tasks == 1
    assert stats.upcoming_tasks == 1


def test_completed_tasks_never_overdue(make_task):
    task = make_task(1, status="completed", due_date=NOW - timedelta(days=5), completed_at=NOW)

    stats = aggregate([task], NOW)

    assert stats.overdue_tasks == 0
    assert not is_overdue(task, NOW)


def test_upcoming_boundaries(make_task):
    at_now = make_task(1, due_date=NOW)
    week_edge = make_task(2, due_date=NOW + timedelta(days=7))
    beyond = make_task(3, due_date=NOW + timedelta(days=7, seconds=1))

    assert not is_upcoming(at_now, NOW)
    assert is_upcoming(week_edge, NOW)
    assert not is_upcoming(beyond, NOW)
    assert aggregate([at_now, week_edge, beyond], NOW).upcoming_tasks == 1


def test_deleted_tasks_count_only_in_total(make_task):
    stats = aggregate([make_task(1, status="deleted"), make_task(2)], NOW)

    assert stats.total_tasks == 2
    assert stats.completed_tasks + stats.pending_tasks == 1


@pytest.mark.parametrize(
    "completed,total,expected",
    [(0, 0, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 2, 50), (5, 5, 100)],
)
def test_completion_rate_rounds_half_up(completed, total, expected):
    assert completion_rate(completed, total) == expected


def test_summarize_activity(make_task):
    tasks = [
        make_task(1, created_at=NOW - timedelta(days=40)),
        make_task(2, created_at=NOW - timedelta(days=10)),
        make_task(
            3,
            created_at=NOW - timedelta(days=2),
            status="completed",
            completed_at=NOW - timedelta(days=1),
        ),
        make_task(4, created_at=NOW - timedelta(hours=1)),
    ]

    summary = summarize_activity(tasks, NOW, limit=2)

    assert [task.id for task in summary.recent_tasks] == [4, 3]
    assert summary.created_this_week == 2
    assert summary.completed_this_week == 1
