"""Task model for TaskSync."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text

from tasksync.c1_database_session.base import Base, utcnow


def format_instant(value: Optional[datetime]) -> Optional[str]:
    """Render a stored (naive UTC) datetime as ISO-8601 with a trailing Z."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


class Task(Base):
    """Task model representing work owned by a creator and optionally assigned."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True)
    title = Column(String(100), nullable=False)
    description = Column(Text)
    due_date = Column(DateTime)
    priority = Column(
        String,
        CheckConstraint("priority IN ('LOW', 'MEDIUM', 'HIGH', 'URGENT')"),
        default="LOW",
        nullable=False,
    )
    status = Column(
        String,
        CheckConstraint("status IN ('ToDo', 'InProgress', 'Review', 'Completed')"),
        default="ToDo",
        nullable=False,
    )
    creator_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assigned_to_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_tasks_creator", "creator_id"),
        Index("idx_tasks_assignee", "assigned_to_id"),
        Index("idx_tasks_due_date", "due_date"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used in REST responses and push events."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": format_instant(self.due_date),
            "priority": self.priority,
            "status": self.status,
            "creatorId": self.creator_id,
            "assignedToId": self.assigned_to_id,
            "createdAt": format_instant(self.created_at),
            "updatedAt": format_instant(self.updated_at),
        }
