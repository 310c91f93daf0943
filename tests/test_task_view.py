"""Tests for client-side view filtering and sorting."""

from datetime import datetime, timezone

from tasksync.c1_task_enums import DueDateSort, TaskPriority, TaskScope, TaskStatus
from tasksync.sdk import TaskFilters, compute_view, is_overdue
from tasksync.sdk.view import parse_instant

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def task(task_id, **fields):
    base = {
        "id": task_id,
        "title": task_id,
        "description": None,
        "dueDate": None,
        "priority": "LOW",
        "status": "ToDo",
        "creatorId": "alice",
        "assignedToId": None,
    }
    base.update(fields)
    return base


def ids(tasks):
    return [t["id"] for t in tasks]


class TestParseInstant:

    def test_zulu_suffix(self):
        assert parse_instant("2024-01-01T00:00:00.000Z") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_garbage_is_none(self):
        assert parse_instant("soon") is None
        assert parse_instant(None) is None


class TestOverdue:
    """Overdue means due strictly in the past and not completed."""

    def test_past_due_open_task_is_overdue(self):
        assert is_overdue(task("a", dueDate="2024-01-01T00:00:00.000Z"), NOW)

    def test_completed_task_is_never_overdue(self):
        assert not is_overdue(task("a", dueDate="2024-01-01T00:00:00.000Z", status="Completed"), NOW)

    def test_due_exactly_now_is_not_overdue(self):
        assert not is_overdue(task("a", dueDate="2025-01-01T00:00:00.000Z"), NOW)

    def test_no_due_date_is_not_overdue(self):
        assert not is_overdue(task("a"), NOW)

    def test_naive_now_is_taken_as_utc(self):
        naive_now = datetime(2025, 1, 1)

        assert is_overdue(task("a", dueDate="2024-12-31T23:59:59.000Z"), naive_now)
        assert not is_overdue(task("a", dueDate="2025-01-01T00:00:01.000Z"), naive_now)

    def test_now_defaults_to_current_time(self):
        assert is_overdue(task("a", dueDate="2000-01-01T00:00:00.000Z"))
        assert not is_overdue(task("a", dueDate="2999-01-01T00:00:00.000Z"))

    def test_overdue_scope(self):
        tasks = [
            task("open", dueDate="2024-01-01T00:00:00.000Z", status="ToDo"),
            task("done", dueDate="2024-01-01T00:00:00.000Z", status="Completed"),
            task("future", dueDate="2026-01-01T00:00:00.000Z"),
            task("undated"),
        ]

        view = compute_view(tasks, TaskFilters(scope=TaskScope.OVERDUE), "alice", now=NOW)

        assert ids(view) == ["open"]


class TestFilters:
    """Scope, status, priority and search filters."""

    def test_default_filters_keep_everything_in_order(self):
        tasks = [task("a"), task("b"), task("c")]

        assert ids(compute_view(tasks, TaskFilters(), "alice", now=NOW)) == ["a", "b", "c"]

    def test_assigned_to_me(self):
        tasks = [task("mine", assignedToId="alice"), task("bobs", assignedToId="bob"), task("none")]

        view = compute_view(tasks, TaskFilters(scope=TaskScope.ASSIGNED_TO_ME), "alice", now=NOW)

        assert ids(view) == ["mine"]

    def test_created_by_me(self):
        tasks = [task("mine"), task("theirs", creatorId="bob", assignedToId="alice")]

        view = compute_view(tasks, TaskFilters(scope=TaskScope.CREATED_BY_ME), "alice", now=NOW)

        assert ids(view) == ["mine"]

    def test_personal_scopes_without_session_user_are_empty(self):
        tasks = [task("a", assignedToId="alice"), task("b")]

        for scope in (TaskScope.ASSIGNED_TO_ME, TaskScope.CREATED_BY_ME):
            assert compute_view(tasks, TaskFilters(scope=scope), None, now=NOW) == []

    def test_status_and_priority_combine(self):
        tasks = [
            task("a", status="InProgress", priority="HIGH"),
            task("b", status="InProgress", priority="LOW"),
            task("c", status="ToDo", priority="HIGH"),
        ]
        filters = TaskFilters(status=TaskStatus.IN_PROGRESS, priority=TaskPriority.HIGH)

        assert ids(compute_view(tasks, filters, "alice", now=NOW)) == ["a"]

    def test_search_matches_title_or_description_case_insensitively(self):
        tasks = [
            task("a", title="Write REPORT"),
            task("b", title="Other", description="the quarterly report"),
            task("c", title="Unrelated"),
        ]

        view = compute_view(tasks, TaskFilters(search="  Report "), "alice", now=NOW)

        assert ids(view) == ["a", "b"]


class TestDueDateSort:
    """Stable due-date ordering with undated tasks last."""

    TASKS = [
        task("undated-1"),
        task("late", dueDate="2025-03-01T00:00:00.000Z"),
        task("early", dueDate="2025-01-15T00:00:00.000Z"),
        task("undated-2"),
        task("late-twin", dueDate="2025-03-01T00:00:00.000Z"),
    ]

    def test_ascending(self):
        view = compute_view(self.TASKS, TaskFilters(due_sort=DueDateSort.ASC), "alice", now=NOW)

        assert ids(view) == ["early", "late", "late-twin", "undated-1", "undated-2"]

    def test_descending_keeps_undated_last(self):
        view = compute_view(self.TASKS, TaskFilters(due_sort=DueDateSort.DESC), "alice", now=NOW)

        assert ids(view) == ["late", "late-twin", "early", "undated-1", "undated-2"]

    def test_view_does_not_mutate_input(self):
        tasks = list(self.TASKS)

        compute_view(tasks, TaskFilters(due_sort=DueDateSort.ASC), "alice", now=NOW)

        assert ids(tasks) == ids(self.TASKS)
