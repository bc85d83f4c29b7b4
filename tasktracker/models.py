"""Core models for task-tracker.

This module defines the core data structures for task tracking:
- TaskState: Enum for the lifecycle state of a task
- Task: A dataclass representing a task with its timestamps
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Optional

_STATE_ALIASES = {
    "todo": "TODO",
    "in-progress": "IN_PROGRESS",
    "in_progress": "IN_PROGRESS",
    "inprogress": "IN_PROGRESS",
    "done": "DONE",
}


class TaskState(IntEnum):
    """Task lifecycle state.

    The integer value is the encoding used in the database file.
    """

    TODO = 0
    IN_PROGRESS = 1
    DONE = 2

    @classmethod
    def parse(cls, text: str) -> Optional["TaskState"]:
        """Parse a state name, case-insensitively.

        Args:
            text: Free-form text such as "done" or "In-Progress"

        Returns:
            The matching TaskState, or None if the text is not a state name
        """
        name = _STATE_ALIASES.get(text.lower())
        return cls[name] if name is not None else None


@dataclass
class Task:
    """Task model representing a single task item.

    Attributes:
        description: Free-form task text
        state: Current lifecycle state of the task
        created_at: Timestamp when the task was created
        last_updated: Timestamp of the last description or state change
    """

    description: str
    state: TaskState = TaskState.TODO
    created_at: datetime = field(default_factory=datetime.now)
    last_updated: Optional[datetime] = None

    def __post_init__(self):
        if self.last_updated is None:
            self.last_updated = self.created_at

    def touch(self) -> None:
        """Bump last_updated, never moving it before created_at."""
        self.last_updated = max(datetime.now(self.created_at.tzinfo), self.created_at)

    def update(self, description: str) -> None:
        self.description = description
        self.touch()

    def change_state(self, state: TaskState) -> None:
        self.state = state
        self.touch()
