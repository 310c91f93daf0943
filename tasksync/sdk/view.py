"""Derived, filtered and sorted views over a client-side task collection."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from tasksync.c1_task_enums import DueDateSort, TaskPriority, TaskScope, TaskStatus


@dataclass(frozen=True)
class TaskFilters:
    """View settings; the defaults show every task in collection order."""

    scope: TaskScope = TaskScope.ALL
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: str = ""
    due_sort: DueDateSort = DueDateSort.NONE


def parse_instant(value: Any) -> Optional[datetime]:
    """Parse a wire timestamp into an aware UTC datetime; None if absent or garbled."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_overdue(task: Dict[str, Any], now: Any = None) -> bool:
    """Due strictly before ``now`` and not completed.

    ``now`` may be naive (taken as UTC), aware, or an ISO string; None means
    the current time.
    """
    due = parse_instant(task.get("dueDate"))
    if due is None:
        return False
    now = parse_instant(now) or datetime.now(timezone.utc)
    return due < now and task.get("status") != TaskStatus.COMPLETED.value


def _matches_search(task: Dict[str, Any], term: str) -> bool:
    title = (task.get("title") or "").lower()
    description = (task.get("description") or "").lower()
    return term in title or term in description


def _due_sort_key(task: Dict[str, Any], descending: bool):
    due = parse_instant(task.get("dueDate"))
    if due is None:
        # Missing due dates go last in both directions
        return (1, 0.0)
    timestamp = due.timestamp()
    return (0, -timestamp if descending else timestamp)


def compute_view(
    tasks: Iterable[Dict[str, Any]],
    filters: TaskFilters,
    current_user_id: Optional[str],
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Apply scope, status, priority, search and due-date ordering, in that order.

    Pure function of its inputs. Sorting is stable, so tasks with equal (or
    missing) due dates keep their collection order.
    """
    now = parse_instant(now) if now is not None else datetime.now(timezone.utc)
    result = list(tasks)

    if filters.scope is TaskScope.ASSIGNED_TO_ME:
        # Without a session user nothing is "mine"
        result = [t for t in result if current_user_id and t.get("assignedToId") == current_user_id]
    elif filters.scope is TaskScope.CREATED_BY_ME:
        result = [t for t in result if current_user_id and t.get("creatorId") == current_user_id]
    elif filters.scope is TaskScope.OVERDUE:
        result = [t for t in result if is_overdue(t, now)]

    if filters.status is not None:
        status = TaskStatus(filters.status).value
        result = [t for t in result if t.get("status") == status]

    if filters.priority is not None:
        priority = TaskPriority(filters.priority).value
        result = [t for t in result if t.get("priority") == priority]

    term = (filters.search or "").strip().lower()
    if term:
        result = [t for t in result if _matches_search(t, term)]

    if filters.due_sort is not DueDateSort.NONE:
        descending = filters.due_sort is DueDateSort.DESC
        result.sort(key=lambda t: _due_sort_key(t, descending))

    return result
