"""Database session management for TaskSync."""

from tasksync.c1_database_session.base import Base, utcnow
from tasksync.c1_database_session.database_manager import DatabaseManager

__all__ = ["Base", "DatabaseManager", "utcnow"]
