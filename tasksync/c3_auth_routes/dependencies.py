"""Request authentication dependency shared by protected routers."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tasksync.c1_errors import UnauthenticatedError

bearer_scheme = HTTPBearer(auto_error=False)


def create_current_user_dependency(server_state):
    """Build a dependency that resolves the bearer token to a user id.

    Args:
        server_state: ServerState instance with identity_service

    Returns:
        Callable usable with ``Depends``
    """

    def current_user_id(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> str:
        if credentials is None:
            raise UnauthenticatedError("Authorization bearer token required")
        return server_state.identity_service.resolve_token(credentials.credentials)

    return current_user_id
