"""Pure task query pipeline: filtering, sorting and aggregation."""

from .filters import (
    DueDateBucket,
    PriorityFilter,
    StatusFilter,
    TaskFilters,
    build_predicate,
    filter_tasks,
)
from .sorting import SortDirection, SortField, SortOption, build_comparator, sort_tasks
from .stats import (
    ActivitySummary,
    TaskStatistics,
    aggregate,
    completion_rate,
    is_due_today,
    is_overdue,
    is_upcoming,
    summarize_activity,
)

__all__ = [
    "TaskFilters",
    "StatusFilter",
    "PriorityFilter",
    "DueDateBucket",
    "build_predicate",
    "filter_tasks",
    "SortField",
    "SortDirection",
    "SortOption",
    "build_comparator",
    "sort_tasks",
    "TaskStatistics",
    "ActivitySummary",
    "aggregate",
    "completion_rate",
    "is_overdue",
    "is_due_today",
    "is_upcoming",
    "summarize_activity",
]
