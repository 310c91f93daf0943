"""Error taxonomy for TaskSync."""

from tasksync.c1_errors.errors import (
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    TaskSyncError,
    UnauthenticatedError,
)

__all__ = [
    "ErrorKind",
    "InvalidInputError",
    "NotFoundError",
    "TaskSyncError",
    "UnauthenticatedError",
]
