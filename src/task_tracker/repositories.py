from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock, RLock
from typing import Any, Dict, List, Mapping, Optional, Union

from .models import TaskEntity, TaskValidationError
from .settings import get_settings

logger = logging.getLogger(__name__)

TASKS_FILENAME = "tasks.json"

# One lock per backing file, shared by every repository instance in the process.
_file_locks: Dict[str, RLock] = {}
_file_locks_guard = Lock()


def _lock_for(path: Path) -> RLock:
    key = str(path.resolve())
    with _file_locks_guard:
        lock = _file_locks.get(key)
        if lock is None:
            lock = _file_locks[key] = RLock()
        return lock


def _utcnow() -> str:
    # Fixed width, so lexical order matches chronological order.
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _require_id(task_id: Optional[str]) -> None:
    if not task_id:
        raise TaskValidationError("Task ID is required")


def _clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise TaskValidationError("Task title is required")
    return title.strip()


def _clean_description(description: Any) -> str:
    if description is None:
        return ""
    return str(description).strip()


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def create(self, title: str, description: str = "") -> TaskEntity:
        """Create, persist and return a new task."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        """Merge the given fields onto a task. Return the updated task or None if not found."""

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Delete a task by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list_all(self) -> List[TaskEntity]:
        """Return every task in insertion order."""

    @abstractmethod
    def list_by_status(self, completed: bool) -> List[TaskEntity]:
        """Return the tasks whose completed flag equals `completed`, in insertion order."""


class JsonFileRepository(Repository):
    """
    Task store backed by a single JSON array in `<data_dir>/tasks.json`.

    Nothing is cached between calls: every operation reads the whole file and
    every write rewrites it. Read failures are logged and treated as an empty
    collection; write failures propagate.

    Mutations are serialized per file within this process. Separate processes
    sharing the file are not coordinated and can lose updates.
    """

    def __init__(self, data_dir: Union[str, Path]) -> None:
        if not data_dir or not str(data_dir).strip():
            raise TaskValidationError("Data directory path is required")
        self._data_dir = Path(data_dir)
        self._path = self._data_dir / TASKS_FILENAME
        self._lock = _lock_for(self._path)
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_file(self) -> None:
        with self._lock:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                self._write([])
                logger.info("Initialized task file %s", self._path)

    def _read(self) -> List[TaskEntity]:
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Error reading tasks from %s: %s", self._path, exc)
            return []
        if not isinstance(data, list):
            logger.error(
                "Error reading tasks from %s: expected a JSON array, got %s",
                self._path,
                type(data).__name__,
            )
            return []
        return [task for task in (self._normalize(item) for item in data) if task is not None]

    def _normalize(self, item: Any) -> Optional[TaskEntity]:
        """Fill missing fields of a stored record; drop records that cannot be addressed."""
        if not isinstance(item, dict) or not isinstance(item.get("id"), str) or not item["id"]:
            logger.error("Skipping malformed task record in %s: %r", self._path, item)
            return None
        task: TaskEntity = {**item}  # type: ignore[typeddict-item]
        task["title"] = str(item.get("title") or "")
        task["description"] = str(item.get("description") or "")
        task["completed"] = bool(item.get("completed"))
        task["createdAt"] = str(item.get("createdAt") or "")
        task["updatedAt"] = str(item.get("updatedAt") or task["createdAt"])
        return task

    def _write(self, tasks: List[TaskEntity]) -> None:
        payload = json.dumps(tasks, indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(prefix=".tasks-", suffix=".tmp", dir=self._data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    def create(self, title: str, description: str = "") -> TaskEntity:
        clean_title = _clean_title(title)
        now = _utcnow()
        task: TaskEntity = {
            "id": str(uuid.uuid4()),
            "title": clean_title,
            "description": _clean_description(description),
            "completed": False,
            "createdAt": now,
            "updatedAt": now,
        }
        with self._lock:
            tasks = self._read()
            tasks.append(task)
            self._write(tasks)
        logger.debug("Task created id=%s", task["id"])
        return task

    def get(self, task_id: str) -> Optional[TaskEntity]:
        _require_id(task_id)
        with self._lock:
            tasks = self._read()
        return next((t for t in tasks if t.get("id") == task_id), None)

    def update(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        _require_id(task_id)

        # Validate before touching the file
        merged: Dict[str, Any] = {}
        if "title" in changes:
            merged["title"] = _clean_title(changes["title"])
        if "description" in changes:
            merged["description"] = _clean_description(changes["description"])
        if "completed" in changes:
            if not isinstance(changes["completed"], bool):
                raise TaskValidationError("Task completed flag must be true or false")
            merged["completed"] = changes["completed"]

        with self._lock:
            tasks = self._read()
            index = next((i for i, t in enumerate(tasks) if t.get("id") == task_id), None)
            if index is None:
                return None

            updated: TaskEntity = {**tasks[index], **merged}  # type: ignore[typeddict-item]
            updated["updatedAt"] = _utcnow()
            tasks[index] = updated
            self._write(tasks)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(merged))
        return updated

    def delete(self, task_id: str) -> bool:
        _require_id(task_id)
        with self._lock:
            tasks = self._read()
            remaining = [t for t in tasks if t.get("id") != task_id]
            if len(remaining) == len(tasks):
                return False
            self._write(remaining)
        logger.debug("Task deleted id=%s", task_id)
        return True

    def list_all(self) -> List[TaskEntity]:
        with self._lock:
            return self._read()

    def list_by_status(self, completed: bool) -> List[TaskEntity]:
        return [t for t in self.list_all() if bool(t.get("completed")) == completed]


# PUBLIC_INTERFACE
def get_repository() -> Repository:
    """
    Return a repository for the configured data directory.

    Cheap to call per request: the store keeps no state besides the path,
    and instances for the same file share one lock.
    """
    settings = get_settings()
    return JsonFileRepository(settings.data_dir)
