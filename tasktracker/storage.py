"""Storage layer for task-tracker.

This module provides an abstract storage interface and the JSON file
implementation used to persist a TaskStore. The file holds the task map
under "tasks" and the auto-id counter under "ptr", pretty-printed with a
4-space indent.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Union

from tasktracker.models import Task, TaskState

if TYPE_CHECKING:
    from tasktracker.store import TaskStore

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for storage failures."""


class DeserializationError(StorageError):
    """The database file is missing, unreadable or malformed."""


class SerializationError(StorageError):
    """The store could not be encoded."""


class Storage(ABC):
    """Abstract base class for task store persistence."""

    @abstractmethod
    def save(self, store: "TaskStore") -> None:
        """Save a store, replacing whatever was stored before.

        Args:
            store: TaskStore to persist
        """
        pass

    @abstractmethod
    def load(self) -> "TaskStore":
        """Load a store.

        Returns:
            The deserialized TaskStore

        Raises:
            DeserializationError: If nothing valid can be read
        """
        pass


def task_to_dict(task: Task) -> Dict[str, Any]:
    return {
        "desc": task.description,
        "state": int(task.state),
        "createdAt": task.created_at.isoformat(),
        "lastUpdated": task.last_updated.isoformat(),
    }


def task_from_dict(data: Dict[str, Any]) -> Task:
    state = data["state"]
    if isinstance(state, bool) or not isinstance(state, int):
        raise ValueError(f"Invalid state code: {state!r}")
    if not isinstance(data["desc"], str):
        raise ValueError(f"Invalid description: {data['desc']!r}")
    return Task(
        description=data["desc"],
        state=TaskState(state),
        created_at=datetime.fromisoformat(data["createdAt"]),
        last_updated=datetime.fromisoformat(data["lastUpdated"]),
    )


def store_to_dict(store: "TaskStore") -> Dict[str, Any]:
    return {
        "tasks": {task_id: task_to_dict(task) for task_id, task in store.tasks.items()},
        "ptr": store.next_id,
    }


def store_from_dict(data: Any) -> "TaskStore":
    from tasktracker.store import TaskStore

    if not isinstance(data, dict) or not isinstance(data.get("tasks"), dict):
        raise ValueError("Expected an object with a 'tasks' mapping")
    ptr = data["ptr"]
    if isinstance(ptr, bool) or not isinstance(ptr, int) or ptr < 0:
        raise ValueError(f"Invalid ptr: {ptr!r}")

    tasks = {}
    for task_id, task_data in data["tasks"].items():
        if not task_id:
            raise ValueError("Task id cannot be empty")
        tasks[task_id] = task_from_dict(task_data)
    return TaskStore(tasks=tasks, next_id=ptr)


class JsonStorage(Storage):
    """JSON file-based storage implementation.

    Saves go to a temporary file next to the target which is then renamed
    over it, so an interrupted save leaves the previous file in place.

    Attributes:
        file_path: Path to the JSON database file
    """

    def __init__(self, file_path: Union[str, Path]):
        """Initialize JsonStorage with a file path.

        Args:
            file_path: Path to the JSON file for storage
        """
        self.file_path = Path(file_path)

    def save(self, store: "TaskStore") -> None:
        """Save the store to the JSON file.

        Args:
            store: TaskStore to persist

        Raises:
            SerializationError: If the store cannot be encoded
            OSError: If the file cannot be written
        """
        try:
            content = json.dumps(store_to_dict(store), indent=4, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, AttributeError) as e:
            raise SerializationError(f"Cannot encode task store: {e}") from e

        # Ensure parent directory exists
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = self.file_path.with_name(self.file_path.name + ".tmp")
        try:
            tmp_path.write_bytes(content)
            os.replace(tmp_path, self.file_path)
        except OSError:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

        logger.debug("Saved %d task(s) to %s", len(store.tasks), self.file_path)

    def load(self) -> "TaskStore":
        """Load the store from the JSON file.

        Returns:
            The deserialized TaskStore

        Raises:
            DeserializationError: If the file is absent, unreadable or malformed
        """
        try:
            content = self.file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise DeserializationError(f"Cannot read {self.file_path}: {e}") from e

        try:
            store = store_from_dict(json.loads(content))
        except (ValueError, KeyError, TypeError) as e:
            raise DeserializationError(f"Malformed task database {self.file_path}: {e}") from e

        logger.debug("Loaded %d task(s) from %s", len(store.tasks), self.file_path)
        return store
