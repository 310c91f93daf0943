"""User database model for TaskSync."""

from typing import Any, Dict

from sqlalchemy import Column, DateTime, Index, String, Text

from tasksync.c1_database_session.base import Base, utcnow
from tasksync.c1_task_models.task import format_instant


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String(100))
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (Index("idx_users_created_at", "created_at"),)

    def to_dict(self) -> Dict[str, Any]:
        """Public representation; never includes the password hash."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "createdAt": format_instant(self.created_at),
        }
