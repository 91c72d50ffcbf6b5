from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task.

    `title` is optional at the schema level so that a missing title can be
    answered with the API's own 400 error instead of a generic validation error.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the task (required)")
    description: Optional[str] = Field(default=None, description="Optional detailed description")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating an existing task.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "completed": True,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="New title; cannot be blank")
    description: Optional[str] = Field(default=None, description="New description")
    completed: Optional[bool] = Field(default=None, description="New completion status")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task. Serialized with camelCase keys,
    matching the backing file.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f2b8c1e-5d0a-4c7e-9a61-2b4f0e9d7c11",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-26T09:00:00.000001Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: str = Field(default="", description="Detailed description, '' when absent")
    completed: bool = Field(..., description="Completion status flag")
    created_at: str = Field(..., description="Creation timestamp (ISO8601, UTC)")
    updated_at: str = Field(..., description="Last update timestamp (ISO8601, UTC)")


class TaskResponse(BaseModel):
    """Envelope for a single task."""

    success: bool = True
    task: TaskOut


class MessageResponse(BaseModel):
    """Envelope for operations that only report a message."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Envelope for every error response."""

    success: bool = False
    error: str
