"""User directory routes for the TaskSync API server."""

from fastapi import APIRouter, Depends

from tasksync.c3_auth_routes.dependencies import create_current_user_dependency


def create_user_router(server_state):
    """Create user router with server_state dependency.

    Args:
        server_state: ServerState instance with identity_service

    Returns:
        APIRouter: Configured router listing users available as assignees
    """
    router = APIRouter(prefix="/api/users", tags=["users"])
    current_user_id = create_current_user_dependency(server_state)

    @router.get("")
    def list_users(user_id: str = Depends(current_user_id)):
        """All registered users."""
        return {"users": server_state.identity_service.list_users()}

    return router
