"""User identity models for TaskSync."""

from tasksync.c1_user_models.user import User

__all__ = ["User"]
