"""C2 Task Service - task orchestration and change notification."""

from tasksync.c2_task_service.task_service import (
    TaskEventPublisher,
    TaskService,
    parse_due_date,
)

__all__ = ["TaskEventPublisher", "TaskService", "parse_due_date"]
