"""Task Enums for TaskSync."""

from enum import Enum


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TaskStatus(str, Enum):
    """Task status enumeration."""
    TODO = "ToDo"
    IN_PROGRESS = "InProgress"
    REVIEW = "Review"
    COMPLETED = "Completed"


class TaskEvent(str, Enum):
    """Realtime event names pushed to connected clients."""
    CREATED = "task:created"
    UPDATED = "task:updated"
    DELETED = "task:deleted"
    ASSIGNED = "task:assigned"


class TaskScope(str, Enum):
    """Client-side view scope."""
    ALL = "ALL"
    ASSIGNED_TO_ME = "ASSIGNED_TO_ME"
    CREATED_BY_ME = "CREATED_BY_ME"
    OVERDUE = "OVERDUE"


class DueDateSort(str, Enum):
    """Client-side due date ordering."""
    NONE = "NONE"
    ASC = "ASC"
    DESC = "DESC"
