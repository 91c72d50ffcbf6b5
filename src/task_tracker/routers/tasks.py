from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from ..repositories import Repository, get_repository
from ..schemas import ErrorResponse, MessageResponse, TaskCreate, TaskOut, TaskResponse, TaskUpdate
from ..utils import list_envelope

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)

TASK_NOT_FOUND = "Task not found"


class TaskListEnvelope(BaseModel):
    """
    Envelope for task list responses.
    """
    success: bool = Field(True, description="Always true for a successful listing")
    count: int = Field(..., description="Number of tasks returned")
    tasks: List[TaskOut] = Field(..., description="Tasks in insertion order")


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TaskListEnvelope,
    summary="List Tasks",
    description=(
        "List all tasks in insertion order.\n\n"
        "Query parameters:\n"
        "- status: 'completed' or 'pending' to filter; any other value lists every task"
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
)
def list_tasks(
    task_status: Optional[str] = Query(
        None, alias="status", description="Filter by status: completed or pending"
    ),
    repo: Repository = Depends(_get_repo),
) -> TaskListEnvelope:
    """
    List tasks, optionally filtered by completion status.
    """
    if task_status == "completed":
        tasks = repo.list_by_status(True)
    elif task_status == "pending":
        tasks = repo.list_by_status(False)
    else:
        tasks = repo.list_all()

    envelope = list_envelope([TaskOut(**t) for t in tasks])  # type: ignore[arg-type]
    return TaskListEnvelope(**envelope)


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={
        200: {"description": "Task found"},
        404: {"model": ErrorResponse, "description": "Task not found"},
    },
)
def get_task(task_id: str, repo: Repository = Depends(_get_repo)) -> TaskResponse:
    """
    Retrieve a single task by its ID.
    """
    item = repo.get(task_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    return TaskResponse(task=TaskOut(**item))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task and return it.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"model": ErrorResponse, "description": "Title missing or blank"},
    },
)
def create_task(payload: Optional[TaskCreate] = None, repo: Repository = Depends(_get_repo)) -> TaskResponse:
    """
    Create a new task. A missing body or title is a 400; a blank title is
    rejected by the store with a 400.
    """
    if payload is None or not payload.title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    created = repo.create(payload.title, payload.description or "")
    return TaskResponse(task=TaskOut(**created))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update Task",
    description="Update any subset of title, description and completed. Omitted fields are left unchanged.",
    responses={
        200: {"description": "Task updated"},
        400: {"model": ErrorResponse, "description": "Blank title"},
        404: {"model": ErrorResponse, "description": "Task not found"},
    },
)
def update_task(task_id: str, payload: TaskUpdate, repo: Repository = Depends(_get_repo)) -> TaskResponse:
    """
    Partial update of a task.
    """
    changes = payload.model_dump(exclude_unset=True)
    updated = repo.update(task_id, changes)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    return TaskResponse(task=TaskOut(**updated))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={
        200: {"description": "Task deleted"},
        404: {"model": ErrorResponse, "description": "Task not found"},
    },
)
def delete_task(task_id: str, repo: Repository = Depends(_get_repo)) -> MessageResponse:
    """
    Delete a task. Returns 404 if it does not exist.
    """
    if not repo.delete(task_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    return MessageResponse(message="Task deleted successfully")
