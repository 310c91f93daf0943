"""C3 Health Routes."""

from tasksync.c3_health_routes.health_routes import router

__all__ = ["router"]
