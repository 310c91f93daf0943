"""Repository for task records scoped by ownership (creator or assignee)."""

import logging
import threading
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from tasksync.c1_database_session import DatabaseManager, utcnow
from tasksync.c1_errors import InvalidInputError
from tasksync.c1_task_models import Task

logger = logging.getLogger(__name__)

# Columns a caller may write through create/update
WRITABLE_FIELDS = ("title", "description", "due_date", "priority", "status", "assigned_to_id")


def _constraint_error(error: IntegrityError) -> InvalidInputError:
    if "FOREIGN KEY" in str(error.orig).upper():
        return InvalidInputError("Unknown assignee")
    return InvalidInputError("Invalid task fields")


class TaskRepository:
    """Atomic single-record operations over the tasks table."""

    def __init__(self, db_manager: DatabaseManager):
        """Initialize task repository.

        Args:
            db_manager: Database manager instance
        """
        self.db_manager = db_manager
        # Mutations are check-then-write; one at a time on the shared connection
        self._write_lock = threading.Lock()

    @staticmethod
    def _participant_filter(user_id: str):
        return or_(Task.creator_id == user_id, Task.assigned_to_id == user_id)

    def _participant_query(self, db, task_id: str, user_id: str):
        return db.query(Task).filter(Task.id == task_id, self._participant_filter(user_id))

    def create(self, creator_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a task owned by ``creator_id``.

        Raises:
            InvalidInputError: if the assignee does not reference a known user
        """
        task = Task(id=str(uuid.uuid4()), creator_id=creator_id)
        for field in WRITABLE_FIELDS:
            if field in values:
                setattr(task, field, values[field])

        try:
            with self._write_lock, self.db_manager.session_scope() as db:
                db.add(task)
                db.flush()
                return task.to_dict()
        except IntegrityError as e:
            logger.warning(f"Task insert rejected by constraints: {e.orig}")
            raise _constraint_error(e)

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """Tasks the user created or is assigned, soonest due first."""
        with self.db_manager.session_scope() as db:
            tasks = (
                db.query(Task)
                .filter(self._participant_filter(user_id))
                .order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.created_at.asc())
                .all()
            )
            return [t.to_dict() for t in tasks]

    def get_for_user(self, task_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """A task if ``user_id`` participates in it, else None."""
        with self.db_manager.session_scope() as db:
            task = self._participant_query(db, task_id, user_id).first()
            return task.to_dict() if task else None

    def update_for_user(
        self, task_id: str, user_id: str, values: Dict[str, Any]
    ) -> Optional[Tuple[Dict[str, Any], Dict[str, Any]]]:
        """Write ``values`` onto a task the user participates in.

        The participant check, the before-image and the write share one
        transaction, so a caller who loses access mid-request cannot write.

        Returns:
            ``(before, after)`` wire dicts, or None if the task is absent or
            the user is not a participant

        Raises:
            InvalidInputError: if the assignee does not reference a known user
        """
        try:
            with self._write_lock, self.db_manager.session_scope() as db:
                task = self._participant_query(db, task_id, user_id).first()
                if not task:
                    return None
                before = task.to_dict()
                for field in WRITABLE_FIELDS:
                    if field in values:
                        setattr(task, field, values[field])
                task.updated_at = utcnow()
                db.flush()
                return before, task.to_dict()
        except IntegrityError as e:
            logger.warning(f"Task {task_id} update rejected by constraints: {e.orig}")
            raise _constraint_error(e)

    def delete_for_user(self, task_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """Hard-delete a task the user participates in.

        Returns:
            The task as it was, or None if it is absent or the user is not a
            participant
        """
        with self._write_lock, self.db_manager.session_scope() as db:
            task = self._participant_query(db, task_id, user_id).first()
            if not task:
                return None
            before = task.to_dict()
            db.delete(task)
            return before
