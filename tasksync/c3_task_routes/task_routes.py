"""Task management routes for the TaskSync API server."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field

from tasksync.c1_task_enums import TaskPriority, TaskStatus
from tasksync.c3_auth_routes.dependencies import create_current_user_dependency

logger = logging.getLogger(__name__)


# Request Models
class CreateTaskRequest(BaseModel):
    """Request model for creating a task."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=100, description="Short task title")
    description: Optional[str] = Field(default=None, description="Free-form details")
    due_date: Optional[str] = Field(default=None, alias="dueDate", description="ISO-8601 due instant")
    priority: Optional[TaskPriority] = Field(default=None, description="Defaults to LOW")
    status: Optional[TaskStatus] = Field(default=None, description="Defaults to ToDo")
    assigned_to_id: Optional[str] = Field(default=None, alias="assignedToId", description="Assignee user ID")


class UpdateTaskRequest(BaseModel):
    """Request model for a partial task update.

    Only fields present in the body are applied. Sending ``null`` for
    description, dueDate or assignedToId clears it.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assigned_to_id: Optional[str] = Field(default=None, alias="assignedToId")


def create_task_router(server_state):
    """Create task router with server_state dependency.

    Args:
        server_state: ServerState instance with task_service and identity_service

    Returns:
        APIRouter: Configured router with task endpoints
    """
    router = APIRouter(prefix="/api/tasks", tags=["tasks"])
    current_user_id = create_current_user_dependency(server_state)

    @router.post("", status_code=201)
    async def create_task(request: CreateTaskRequest, user_id: str = Depends(current_user_id)):
        """Create a task owned by the caller."""
        logger.info(f"Creating task from user {user_id}: {request.title[:100]}")
        task = await server_state.task_service.create_task(user_id, request.model_dump())
        return {"task": task}

    @router.get("")
    async def list_tasks(user_id: str = Depends(current_user_id)):
        """Tasks the caller created or is assigned."""
        return {"tasks": await server_state.task_service.list_tasks(user_id)}

    @router.get("/{task_id}")
    async def get_task(task_id: str, user_id: str = Depends(current_user_id)):
        """A single task the caller participates in."""
        return {"task": await server_state.task_service.get_task(task_id, user_id)}

    @router.put("/{task_id}")
    async def update_task(
        task_id: str, request: UpdateTaskRequest, user_id: str = Depends(current_user_id)
    ):
        """Apply a partial update to a task."""
        changes = request.model_dump(exclude_unset=True)
        task = await server_state.task_service.update_task(task_id, user_id, changes)
        return {"task": task}

    @router.delete("/{task_id}", status_code=204)
    async def delete_task(task_id: str, user_id: str = Depends(current_user_id)):
        """Delete a task the caller participates in."""
        await server_state.task_service.delete_task(task_id, user_id)
        return Response(status_code=204)

    return router
