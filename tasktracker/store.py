"""Task store for task-tracker.

This module provides the TaskStore class: the mapping from task id to Task
plus the auto-increment counter used to generate ids. It handles task
creation, updates, state changes, deletion and the list queries, and
loads/saves itself through the storage layer.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from tasktracker.models import Task, TaskState
from tasktracker.storage import JsonStorage

logger = logging.getLogger(__name__)

Listing = Tuple[List[Tuple[str, str]], int]


def _listing(pairs: List[Tuple[str, str]]) -> Listing:
    return pairs, max((len(task_id) for task_id, _ in pairs), default=0)


class TaskStore:
    """All tasks of one database file.

    Attributes:
        tasks: Mapping from task id to Task
        next_id: Counter behind auto-generated ids. Only add() moves it,
            by exactly one per call.
    """

    def __init__(self, tasks: Optional[Dict[str, Task]] = None, next_id: int = 0):
        self.tasks = tasks if tasks is not None else {}
        self.next_id = next_id

    @classmethod
    def new(cls) -> "TaskStore":
        return cls()

    @classmethod
    def load(cls, path: Union[str, Path]) -> "TaskStore":
        """Load a store from a JSON database file.

        Args:
            path: Database file to read

        Returns:
            The loaded TaskStore

        Raises:
            DeserializationError: If the file is absent, unreadable or malformed
        """
        return JsonStorage(path).load()

    def save(self, path: Union[str, Path]) -> None:
        """Write the whole store to path, overwriting the file.

        Raises:
            SerializationError: If the store cannot be encoded
            OSError: If the file cannot be written
        """
        JsonStorage(path).save(self)

    def add(self, description: str) -> str:
        """Add a task under the next auto-generated id.

        Args:
            description: Task text

        Returns:
            The generated id
        """
        self.next_id += 1
        task_id = str(self.next_id)
        if task_id in self.tasks:
            logger.warning("Auto-generated id %s replaces an existing task", task_id)
        self.tasks[task_id] = Task(description=description)
        logger.debug("Added task %s", task_id)
        return task_id

    def add_with_id(self, task_id: str, description: str) -> None:
        """Add a task under a caller-supplied id, replacing any task there.

        Raises:
            ValueError: If task_id is empty
        """
        if not task_id:
            raise ValueError("Task id cannot be empty")
        if task_id in self.tasks:
            logger.debug("Overwriting task %s", task_id)
        self.tasks[task_id] = Task(description=description)

    def get(self, task_id: str) -> Optional[Task]:
        return self.tasks.get(task_id)

    def update(self, task_id: str, description: str) -> Optional[Task]:
        """Replace the description of a task.

        Returns:
            The updated Task, or None if no task has this id
        """
        task = self.tasks.get(task_id)
        if task is None:
            return None

        task.update(description)
        logger.debug("Updated task %s", task_id)
        return task

    def delete(self, task_id: str) -> bool:
        """Delete a task by id.

        Returns:
            True if the task was deleted, False if it didn't exist
        """
        if task_id not in self.tasks:
            return False

        del self.tasks[task_id]
        logger.debug("Deleted task %s", task_id)
        return True

    def change_state(self, task_id: str, state: TaskState) -> Optional[Task]:
        """Move a task to another state. Any transition is allowed.

        Returns:
            The updated Task, or None if no task has this id
        """
        task = self.tasks.get(task_id)
        if task is None:
            return None

        task.change_state(state)
        logger.debug("Task %s is now %s", task_id, state.name)
        return task

    def mark_todo(self, task_id: str) -> Optional[Task]:
        return self.change_state(task_id, TaskState.TODO)

    def mark_in_progress(self, task_id: str) -> Optional[Task]:
        return self.change_state(task_id, TaskState.IN_PROGRESS)

    def mark_done(self, task_id: str) -> Optional[Task]:
        return self.change_state(task_id, TaskState.DONE)

    def all(self) -> Listing:
        """List every task.

        Returns:
            (id, description) pairs and the longest id length among them
        """
        return _listing([(task_id, task.description) for task_id, task in self.tasks.items()])

    def filter(self, query: str) -> Listing:
        """List the tasks matching query.

        The query is read as a state name first ("todo", "in-progress",
        "done", ...). Otherwise it is an exact task id and the result holds
        that task, or nothing.

        Returns:
            (id, description) pairs and the longest id length among them
        """
        state = TaskState.parse(query)
        if state is not None:
            return _listing([
                (task_id, task.description)
                for task_id, task in self.tasks.items()
                if task.state == state
            ])

        task = self.tasks.get(query)
        if task is None:
            return _listing([])
        return _listing([(query, task.description)])
