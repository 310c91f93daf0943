"""C3 Task Routes."""

from tasksync.c3_task_routes.task_routes import create_task_router

__all__ = ["create_task_router"]
