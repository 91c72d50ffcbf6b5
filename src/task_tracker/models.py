from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A task record exactly as it is stored in the backing JSON file.

    Fields:
    - id: UUID4 string, assigned at creation
    - title: Short title, trimmed, never empty
    - description: Free text, trimmed, '' when not given
    - completed: Boolean completion flag
    - createdAt: UTC creation timestamp (ISO8601 string), never changes
    - updatedAt: UTC last update timestamp (ISO8601 string)
    """

    id: str
    title: str
    description: str
    completed: bool
    createdAt: str
    updatedAt: str


class TaskValidationError(ValueError):
    """Raised when a task operation receives an empty title or id."""
