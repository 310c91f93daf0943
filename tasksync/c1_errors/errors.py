"""Closed error taxonomy raised by TaskSync services.

Every failure a caller can observe is one of the :class:`ErrorKind` members.
Services raise the matching :class:`TaskSyncError` subclass; the HTTP layer
maps the kind to a status code in one place.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Error kind enumeration."""
    INVALID_INPUT = "invalid_input"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND_OR_FORBIDDEN = "not_found_or_forbidden"


HTTP_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND_OR_FORBIDDEN: 404,
}


class TaskSyncError(Exception):
    """Base class for errors that carry an :class:`ErrorKind`."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self):
        return {"detail": self.message, "error": self.kind.value}


class InvalidInputError(TaskSyncError):
    """Malformed or constraint-violating request fields."""

    kind = ErrorKind.INVALID_INPUT


class UnauthenticatedError(TaskSyncError):
    """Missing, malformed or expired credential."""

    kind = ErrorKind.UNAUTHENTICATED


class NotFoundError(TaskSyncError):
    """Record absent, or the caller has no relation to it.

    The two cases are deliberately reported the same way so that task
    existence never leaks to non-participants.
    """

    kind = ErrorKind.NOT_FOUND_OR_FORBIDDEN
