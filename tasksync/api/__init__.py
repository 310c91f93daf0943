"""HTTP application assembly for TaskSync."""

from tasksync.api.server import ServerState, create_app

__all__ = ["ServerState", "create_app"]
