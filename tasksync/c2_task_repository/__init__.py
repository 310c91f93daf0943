"""C2 Task Repository - ownership-scoped task persistence."""

from tasksync.c2_task_repository.task_repository import TaskRepository

__all__ = ["TaskRepository"]
