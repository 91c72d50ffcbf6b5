from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence, Union


# PUBLIC_INTERFACE
def list_envelope(items: Union[Sequence[Any], Iterable[Any]]) -> Dict[str, Any]:
    """
    Build the standard envelope for task list endpoints.

    Args:
        items: The tasks to return.

    Returns:
        Dict with keys: success, count, tasks.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "success": True,
        "count": len(materialized),
        "tasks": materialized,
    }


# PUBLIC_INTERFACE
def error_body(message: str) -> Dict[str, Any]:
    """Return the JSON body used for every error response."""
    return {"success": False, "error": message}
