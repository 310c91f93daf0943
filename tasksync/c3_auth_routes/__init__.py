"""C3 Auth Routes - registration, login and profile endpoints."""

from tasksync.c3_auth_routes.auth_routes import create_auth_router
from tasksync.c3_auth_routes.dependencies import create_current_user_dependency

__all__ = ["create_auth_router", "create_current_user_dependency"]
