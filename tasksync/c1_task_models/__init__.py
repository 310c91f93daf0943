"""Task persistence model for TaskSync."""

from tasksync.c1_task_models.task import Task, format_instant

__all__ = ["Task", "format_instant"]
