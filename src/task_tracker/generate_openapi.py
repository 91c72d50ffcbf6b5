"""
Utility script to generate and write the OpenAPI schema for the task API.

Imports the FastAPI application and serializes its OpenAPI schema to
interfaces/openapi.json so that API clients and documentation tools can
consume a stable schema without running the server.

Usage:
    python -m task_tracker.generate_openapi [ROOT]

ROOT defaults to the current working directory.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .main import app, openapi_tags

logger = logging.getLogger(__name__)


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Make sure every tag in `openapi_tags` is present in the schema's tag
    metadata, without overriding definitions that already exist.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(root: Optional[Union[str, Path]] = None) -> Path:
    """Write the OpenAPI schema to <root>/interfaces/openapi.json and return the path."""
    schema = app.openapi()
    _ensure_tags(schema)

    interfaces_dir = Path(root or Path.cwd()) / "interfaces"
    interfaces_dir.mkdir(parents=True, exist_ok=True)
    out_path = interfaces_dir / "openapi.json"

    with out_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", out_path)
    return out_path


def main() -> None:
    root = sys.argv[1] if len(sys.argv) > 1 else None
    out_path = generate_openapi(root)
    print(f"Wrote OpenAPI schema to: {out_path}")


if __name__ == "__main__":
    main()
