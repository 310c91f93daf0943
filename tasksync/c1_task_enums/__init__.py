"""Task enumerations shared by the server and the client SDK."""

from tasksync.c1_task_enums.task_enums import (
    DueDateSort,
    TaskEvent,
    TaskPriority,
    TaskScope,
    TaskStatus,
)

__all__ = ["DueDateSort", "TaskEvent", "TaskPriority", "TaskScope", "TaskStatus"]
