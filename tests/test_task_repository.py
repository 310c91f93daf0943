"""Tests for ownership-scoped task writes in the repository."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from tasksync.c1_errors import InvalidInputError


@pytest.fixture
def shared_task(task_repository, make_user):
    """A task created by alice and assigned to carol."""
    alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
    task = task_repository.create(alice, {"title": "Shared", "assigned_to_id": carol})
    return task, alice, bob, carol


class TestUpdateForUser:

    def test_returns_before_and_after(self, task_repository, shared_task):
        task, alice, bob, carol = shared_task

        before, after = task_repository.update_for_user(task["id"], alice, {"assigned_to_id": bob})

        assert before["assignedToId"] == carol
        assert after["assignedToId"] == bob
        assert after["title"] == "Shared"

    def test_outsider_cannot_write(self, task_repository, shared_task):
        task, alice, bob, carol = shared_task

        assert task_repository.update_for_user(task["id"], bob, {"title": "hijacked"}) is None
        assert task_repository.get_for_user(task["id"], alice)["title"] == "Shared"

    def test_former_assignee_cannot_write_after_losing_access(self, task_repository, shared_task):
        task, alice, bob, carol = shared_task
        task_repository.update_for_user(task["id"], alice, {"assigned_to_id": bob, "status": "Completed"})

        assert task_repository.update_for_user(task["id"], carol, {"title": "carol was here"}) is None

        current = task_repository.get_for_user(task["id"], alice)
        assert current["title"] == "Shared"
        assert current["status"] == "Completed"

    def test_unknown_assignee(self, task_repository, shared_task):
        task, alice, _, _ = shared_task

        with pytest.raises(InvalidInputError, match="Unknown assignee"):
            task_repository.update_for_user(task["id"], alice, {"assigned_to_id": "ghost"})

    def test_concurrent_reassignments_change_assignee_once(self, task_repository, shared_task):
        task, alice, bob, carol = shared_task
        start = threading.Barrier(2)

        def reassign(user_id):
            start.wait()
            return task_repository.update_for_user(task["id"], user_id, {"assigned_to_id": bob})

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(reassign, [alice, carol]))

        changes = [r for r in results if r is not None and r[0]["assignedToId"] != r[1]["assignedToId"]]
        assert len(changes) == 1
        assert task_repository.get_for_user(task["id"], alice)["assignedToId"] == bob


class TestDeleteForUser:

    def test_returns_deleted_record(self, task_repository, shared_task):
        task, alice, _, _ = shared_task

        deleted = task_repository.delete_for_user(task["id"], alice)

        assert deleted == task
        assert task_repository.get_for_user(task["id"], alice) is None

    def test_outsider_cannot_delete(self, task_repository, shared_task):
        task, alice, bob, _ = shared_task

        assert task_repository.delete_for_user(task["id"], bob) is None
        assert task_repository.get_for_user(task["id"], alice) is not None

    def test_second_delete_finds_nothing(self, task_repository, shared_task):
        task, alice, _, _ = shared_task
        task_repository.delete_for_user(task["id"], alice)

        assert task_repository.delete_for_user(task["id"], alice) is None
