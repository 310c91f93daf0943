"""Client-side reconciliation store.

Holds the client's local task collection, seeded by a full-list fetch and kept
current by push events. Push events may duplicate REST responses or arrive
before the initial list, so every handler is idempotent:

- ``task:created`` appends only if the id is not already present.
- ``task:updated`` replaces in place; unknown ids are dropped.
- ``task:deleted`` removes; unknown ids are a no-op.
- ``task:assigned`` prepends a notification when the task is assigned to the
  session user. Repeated assignments produce repeated notifications.
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from tasksync.c1_task_enums import TaskEvent
from tasksync.sdk.events import EventSource, Unsubscribe
from tasksync.sdk.view import TaskFilters, compute_view

logger = logging.getLogger(__name__)

TASK_FIELDS = (
    "id",
    "title",
    "description",
    "dueDate",
    "priority",
    "status",
    "creatorId",
    "assignedToId",
    "createdAt",
    "updatedAt",
)

Listener = Callable[[str], None]


@dataclass(frozen=True)
class Notification:
    """A client-local "you were assigned" notice."""

    id: str
    task_id: str
    title: str
    received_at: datetime


def normalize_task(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Unwrap ``{"task": {...}}`` responses and fill absent optional fields."""
    if isinstance(raw, dict) and isinstance(raw.get("task"), dict):
        raw = raw["task"]
    if not isinstance(raw, dict) or not raw.get("id"):
        raise ValueError(f"Not a task payload: {raw!r}")
    return {field: raw.get(field) for field in TASK_FIELDS}


def normalize_list(raw: Any) -> List[Dict[str, Any]]:
    """Accept either ``{"tasks": [...]}`` or a bare list."""
    items = raw if isinstance(raw, list) else (raw or {}).get("tasks", [])
    return [normalize_task(item) for item in items]


class ReconciliationStore:
    """Eventually-consistent local view of the caller's tasks."""

    def __init__(
        self,
        current_user_id: Optional[str],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the store for one session.

        Args:
            current_user_id: Session user; assignment notices for anyone else are ignored
            clock: Source of "now" for notification timestamps
        """
        self.current_user_id = current_user_id
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tasks: List[Dict[str, Any]] = []
        self._notifications: List[Notification] = []
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._handlers = {
            TaskEvent.CREATED.value: self._on_created,
            TaskEvent.UPDATED.value: self._on_updated,
            TaskEvent.DELETED.value: self._on_deleted,
            TaskEvent.ASSIGNED.value: self._on_assigned,
        }

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------
    @property
    def tasks(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(t) for t in self._tasks]

    @property
    def notifications(self) -> List[Notification]:
        """Most recent first."""
        with self._lock:
            return list(self._notifications)

    def get(self, task_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            index = self._index_of(task_id)
            return dict(self._tasks[index]) if index is not None else None

    def visible_tasks(
        self, filters: Optional[TaskFilters] = None, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Filtered, optionally sorted view of the collection."""
        return compute_view(self.tasks, filters or TaskFilters(), self.current_user_id, now)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def load(self, snapshot: Any):
        """Replace the collection with a full-list fetch result."""
        tasks = normalize_list(snapshot)
        with self._lock:
            self._tasks = tasks
        logger.debug(f"Loaded {len(tasks)} tasks")
        self._notify("load")

    def apply(self, event: str, payload: Any) -> bool:
        """Reconcile one push event.

        Returns:
            True if local state changed
        """
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug(f"Ignoring unknown event {event}")
            return False

        try:
            with self._lock:
                changed = handler(payload)
        except ValueError as e:
            logger.warning(f"Ignoring malformed {event} payload: {e}")
            return False

        if changed:
            self._notify(event)
        return changed

    def dismiss(self, notification_id: str) -> bool:
        """Drop one notification."""
        with self._lock:
            before = len(self._notifications)
            self._notifications = [n for n in self._notifications if n.id != notification_id]
            changed = len(self._notifications) != before
        if changed:
            self._notify("dismiss")
        return changed

    def reset(self):
        """Forget everything at session end."""
        with self._lock:
            self._tasks = []
            self._notifications = []
        self._notify("reset")

    # ------------------------------------------------------------------
    # Event handlers (called with the lock held)
    # ------------------------------------------------------------------
    def _index_of(self, task_id: str) -> Optional[int]:
        for index, task in enumerate(self._tasks):
            if task["id"] == task_id:
                return index
        return None

    def _on_created(self, payload: Any) -> bool:
        task = normalize_task(payload)
        if self._index_of(task["id"]) is not None:
            return False
        self._tasks.append(task)
        return True

    def _on_updated(self, payload: Any) -> bool:
        task = normalize_task(payload)
        index = self._index_of(task["id"])
        if index is None:
            return False
        self._tasks[index] = task
        return True

    def _on_deleted(self, payload: Any) -> bool:
        task_id = payload.get("id") if isinstance(payload, dict) else None
        if not task_id:
            return False
        index = self._index_of(task_id)
        if index is None:
            return False
        del self._tasks[index]
        return True

    def _on_assigned(self, payload: Any) -> bool:
        task = normalize_task(payload)
        if not task["assignedToId"] or task["assignedToId"] != self.current_user_id:
            return False
        notification = Notification(
            id=f"{task['id']}-{uuid.uuid4().hex[:12]}",
            task_id=task["id"],
            title=task["title"] or "",
            received_at=self._clock(),
        )
        self._notifications.insert(0, notification)
        return True

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Call ``listener(reason)`` after every state change.

        Returns:
            A callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, reason: str):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(reason)
            except Exception:
                logger.exception(f"Store listener failed on {reason}")

    @contextmanager
    def bind(self, source: EventSource) -> Iterator["ReconciliationStore"]:
        """Route the four task events from ``source`` into this store.

        Every handler registered here is released when the block exits, so a
        torn-down connection never leaves listeners behind.
        """
        releases = []
        try:
            for event in self._handlers:
                releases.append(source.on(event, lambda payload, event=event: self.apply(event, payload)))
            yield self
        finally:
            for release in releases:
                release()
