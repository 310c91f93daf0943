"""Authentication routes for the TaskSync API server."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tasksync.c3_auth_routes.dependencies import create_current_user_dependency

logger = logging.getLogger(__name__)


# Request Models
class RegisterRequest(BaseModel):
    """Request model for registering a user."""

    email: str = Field(..., description="Unique email address")
    password: str = Field(..., min_length=8, description="At least 8 characters")
    name: Optional[str] = Field(default=None, max_length=100, description="Display name")


class LoginRequest(BaseModel):
    """Request model for logging in."""

    email: str
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    """Request model for changing the display name."""

    name: str = Field(..., min_length=1, max_length=100)


def create_auth_router(server_state):
    """Create auth router with server_state dependency.

    Args:
        server_state: ServerState instance with identity_service

    Returns:
        APIRouter: Configured router with auth endpoints
    """
    router = APIRouter(prefix="/api/auth", tags=["auth"])
    current_user_id = create_current_user_dependency(server_state)

    @router.post("/register", status_code=201)
    def register(request: RegisterRequest):
        """Register a user and return it with an access token."""
        user, token = server_state.identity_service.register(
            request.email, request.password, request.name
        )
        return {"user": user, "token": token}

    @router.post("/login")
    def login(request: LoginRequest):
        """Exchange email and password for an access token."""
        user, token = server_state.identity_service.login(request.email, request.password)
        return {"user": user, "token": token}

    @router.get("/me")
    def me(user_id: str = Depends(current_user_id)):
        """Profile of the authenticated user."""
        return {"user": server_state.identity_service.get_user(user_id)}

    @router.put("/me")
    def update_profile(request: UpdateProfileRequest, user_id: str = Depends(current_user_id)):
        """Change the authenticated user's display name."""
        return {"user": server_state.identity_service.update_profile(user_id, request.name)}

    return router
