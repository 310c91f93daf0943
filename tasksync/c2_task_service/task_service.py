"""Service layer orchestrating task persistence and realtime fan-out."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from tasksync.c1_errors import InvalidInputError, NotFoundError
from tasksync.c1_task_enums import TaskEvent, TaskPriority, TaskStatus
from tasksync.c2_task_repository import TaskRepository

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
UPDATABLE_FIELDS = ("title", "description", "due_date", "priority", "status", "assigned_to_id")
# Fields where an explicit None (or empty string) clears the stored value
NULLABLE_FIELDS = ("description", "due_date", "assigned_to_id")


class TaskEventPublisher(Protocol):
    """What the service needs from the realtime hub."""

    async def broadcast_all(self, event: str, payload: Dict[str, Any]) -> int: ...

    async def notify_user(self, user_id: str, event: str, payload: Dict[str, Any]) -> int: ...


def parse_due_date(value: Any) -> Optional[datetime]:
    """Parse a due date into a naive UTC datetime.

    Accepts ISO-8601 strings (with or without offset, ``Z`` included) and
    datetime objects. Naive values are taken to be UTC already.

    Raises:
        InvalidInputError: if the value cannot be parsed
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidInputError(f"Invalid due date: {value!r}")
    else:
        raise InvalidInputError(f"Invalid due date: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _clean_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError("Title is required")
    if len(value) > MAX_TITLE_LENGTH:
        raise InvalidInputError(f"Title must be <= {MAX_TITLE_LENGTH} chars")
    return value


def _clean_enum(enum_cls, value: Any, label: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidInputError(f"Invalid {label} {value!r}; expected one of {allowed}")


def _clean_optional_text(value: Any, label: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidInputError(f"Invalid {label}")
    return value


class TaskService:
    """Task CRUD scoped to participants, with change notifications."""

    def __init__(self, repository: TaskRepository, publisher: TaskEventPublisher):
        """Initialize task service.

        Args:
            repository: Task repository
            publisher: Realtime hub (or any object with the same emit contract)
        """
        self.repository = repository
        self.publisher = publisher

    # ------------------------------------------------------------------
    # Field normalization
    # ------------------------------------------------------------------
    @staticmethod
    def _normalize(field: str, value: Any) -> Any:
        if field == "title":
            return _clean_title(value)
        if field == "description":
            return _clean_optional_text(value, "description")
        if field == "due_date":
            return parse_due_date(value)
        if field == "priority":
            return _clean_enum(TaskPriority, value, "priority")
        if field == "status":
            return _clean_enum(TaskStatus, value, "status")
        if field == "assigned_to_id":
            return _clean_optional_text(value, "assignee")
        raise InvalidInputError(f"Unknown task field: {field}")

    def _merge(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Values to write for a partial update.

        Keys absent from ``changes`` are left untouched. An explicit None
        clears nullable fields and is ignored for required ones.
        """
        values = {}
        for field, value in changes.items():
            if field not in UPDATABLE_FIELDS:
                raise InvalidInputError(f"Unknown task field: {field}")
            if value is None and field not in NULLABLE_FIELDS:
                continue
            values[field] = self._normalize(field, value)
        return values

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def create_task(self, owner_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create a task owned by ``owner_id`` and announce it.

        Raises:
            InvalidInputError: on a bad title, enum value, due date or assignee
        """
        values = {
            "title": _clean_title(fields.get("title")),
            "description": _clean_optional_text(fields.get("description"), "description"),
            "due_date": parse_due_date(fields.get("due_date")),
            "priority": _clean_enum(TaskPriority, fields.get("priority") or TaskPriority.LOW, "priority"),
            "status": _clean_enum(TaskStatus, fields.get("status") or TaskStatus.TODO, "status"),
            "assigned_to_id": _clean_optional_text(fields.get("assigned_to_id"), "assignee"),
        }

        task = await asyncio.to_thread(self.repository.create, owner_id, values)
        logger.info(f"Task {task['id']} created by {owner_id}")

        await self.publisher.broadcast_all(TaskEvent.CREATED.value, task)
        if task["assignedToId"]:
            await self.publisher.notify_user(task["assignedToId"], TaskEvent.ASSIGNED.value, task)
        return task

    async def list_tasks(self, user_id: str) -> List[Dict[str, Any]]:
        """Tasks the user created or is assigned."""
        return await asyncio.to_thread(self.repository.list_for_user, user_id)

    async def get_task(self, task_id: str, user_id: str) -> Dict[str, Any]:
        """A single task visible to ``user_id``.

        Raises:
            NotFoundError: if the task is absent or the user is not a participant
        """
        task = await asyncio.to_thread(self.repository.get_for_user, task_id, user_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def update_task(self, task_id: str, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update and announce it.

        Raises:
            NotFoundError: if the task is absent or the user is not a participant
            InvalidInputError: on a bad field value
        """
        values = self._merge(changes)

        result = await asyncio.to_thread(self.repository.update_for_user, task_id, user_id, values)
        if result is None:
            raise NotFoundError("Task not found")
        before, updated = result

        logger.info(f"Task {task_id} updated by {user_id}: {sorted(values)}")
        await self.publisher.broadcast_all(TaskEvent.UPDATED.value, updated)

        previous_assignee = before["assignedToId"]
        new_assignee = updated["assignedToId"]
        if new_assignee and new_assignee != previous_assignee:
            logger.info(f"Task {task_id} reassigned from {previous_assignee} to {new_assignee}")
            await self.publisher.notify_user(new_assignee, TaskEvent.ASSIGNED.value, updated)

        return updated

    async def delete_task(self, task_id: str, user_id: str) -> Dict[str, Any]:
        """Hard-delete a task and return the record as it was.

        Raises:
            NotFoundError: if the task is absent or the user is not a participant
        """
        deleted = await asyncio.to_thread(self.repository.delete_for_user, task_id, user_id)
        if deleted is None:
            raise NotFoundError("Task not found")

        logger.info(f"Task {task_id} deleted by {user_id}")
        await self.publisher.broadcast_all(TaskEvent.DELETED.value, {"id": task_id})
        return deleted
