"""Тесты сортировки задач."""

from datetime import timedelta

from src.query import SortDirection, SortField, SortOption, build_comparator, sort_tasks
from tests.conftest import NOW


def ids(tasks):
    return [task.id for task in tasks]


def test_parse_sort_option():
    expected = SortOption(SortField.PRIORITY, SortDirection.DESC)
    assert SortOption.parse("priority", "desc") == expected
    assert SortOption.parse("dueDate", "ASC") == SortOption(SortField.DUE_DATE, SortDirection.ASC)
    # Неизвестное направление -> ASC, неизвестное поле -> без сортировки
    assert SortOption.parse("title", "sideways").direction is SortDirection.ASC
    assert SortOption.parse("color", "asc") is None
    assert SortOption.parse(None) is None


def test_no_sort_keeps_order(make_task):
    tasks = [make_task(2), make_task(1), make_task(3)]

    assert ids(sort_tasks(tasks, None)) == [2, 1, 3]


def test_priority_desc_puts_high_first(make_task):
    tasks = [
        make_task(1, priority="low"),
        make_task(2, priority="high"),
        make_task(3, priority="medium"),
    ]

    result = sort_tasks(tasks, SortOption.parse("priority", "desc"))

    assert ids(result) == [2, 3, 1]


def test_missing_due_date_sorts_as_earliest(make_task):
    tasks = [
        make_task(1, due_date=NOW + timedelta(days=2)),
        make_task(2),
        make_task(3, due_date=NOW + timedelta(days=1)),
    ]

    assert ids(sort_tasks(tasks, SortOption.parse("due_date", "asc"))) == [2, 3, 1]
    assert ids(sort_tasks(tasks, SortOption.parse("due_date", "desc"))) == [1, 3, 2]


def test_title_sort_ignores_case(make_task):
    tasks = [
        make_task(1, title="banana"),
        make_task(2, title="Apple"),
        make_task(3, title="cherry"),
    ]

    assert ids(sort_tasks(tasks, SortOption.parse("title"))) == [2, 1, 3]


def test_sort_is_stable_for_equal_keys(make_task):
    tasks = [
        make_task(1, priority="high"),
        make_task(2, priority="low"),
        make_task(3, priority="high"),
        make_task(4, priority="low"),
    ]

    assert ids(sort_tasks(tasks, SortOption.parse("priority", "asc"))) == [2, 4, 1, 3]
    assert ids(sort_tasks(tasks, SortOption.parse("priority", "desc"))) == [1, 3, 2, 4]


def test_created_at_sort(make_task):
    tasks = [
        make_task(1, created_at=NOW - timedelta(days=1)),
        make_task(2, created_at=NOW),
        make_task(3, created_at=NOW - timedelta(days=3)),
    ]

    assert ids(sort_tasks(tasks, SortOption.parse("created_at", "desc"))) == [2, 1, 3]


def test_comparator_desc_mirrors_asc(make_task):
    low, high = make_task(1, priority="low"), make_task(2, priority="high")
    asc = build_comparator(SortOption(SortField.PRIORITY, SortDirection.ASC))
    desc = build_comparator(SortOption(SortField.PRIORITY, SortDirection.DESC))

    assert asc(low, high) == -1
    assert desc(low, high) == 1
    assert asc(low, low) == 0


def test_sort_returns_new_list(make_task):
    tasks = [make_task(2, title="b"), make_task(1, title="a")]

    result = sort_tasks(tasks, SortOption.parse("title"))

    assert ids(tasks) == [2, 1]
    assert ids(result) == [1, 2]
