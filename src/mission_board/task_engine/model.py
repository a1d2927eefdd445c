"""Task model for the mission board.

A task is a short description with a priority, an optional due date and a
completion flag. Manual ordering is not a task field: it is the position of
the task in the store's collection.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..clock import is_date_key


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskPriority(str, Enum):
    """Priority level; HIGH is most urgent."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self.value]


PRIORITY_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _generate_id() -> str:
    """Short task ID: ``task-<12hex>``."""
    return f"task-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A single mission on the board.

    ``completed_date`` is set exactly when ``completed`` is true; use
    :meth:`mark_completed` and :meth:`mark_active` rather than assigning the
    two fields separately.
    """

    id: str
    text: str
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[str] = None
    completed: bool = False
    completed_date: Optional[str] = None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @classmethod
    def validate_dict(cls, data: Any) -> list[str]:
        """Structural validation of a persisted task record.

        Returns a list of error strings (empty = valid).
        """
        if not isinstance(data, dict):
            return ["Expected a dict"]
        errors: list[str] = []
        task_id = data.get("id")
        if not isinstance(task_id, str) or not task_id:
            errors.append("'id' is required and must be a non-empty string")
        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            errors.append("'text' is required and must be non-empty")
        priority = data.get("priority")
        if not isinstance(priority, str) or priority not in PRIORITY_RANK:
            errors.append(f"'priority' must be one of {sorted(PRIORITY_RANK)}, got {priority!r}")
        for key in ("dueDate", "completedDate"):
            value = data.get(key)
            if value is not None and not is_date_key(value):
                errors.append(f"'{key}' must be a YYYY-MM-DD date or null, got {value!r}")
        completed = data.get("completed")
        if not isinstance(completed, bool):
            errors.append("'completed' must be a boolean")
        elif not completed and data.get("completedDate") is not None:
            # Completed records saved before completion dates were tracked
            # carry no completedDate; only the reverse is inconsistent.
            errors.append("'completedDate' must be null when 'completed' is false")
        return errors

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted record layout."""
        return {
            "id": self.id,
            "text": self.text,
            "priority": self.priority.value,
            "dueDate": self.due_date,
            "completed": self.completed,
            "completedDate": self.completed_date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize a record that already passed :meth:`validate_dict`."""
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            priority=TaskPriority(data["priority"]),
            due_date=data.get("dueDate") or None,
            completed=bool(data["completed"]),
            completed_date=data.get("completedDate") or None,
        )

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------

    def mark_completed(self, today: str) -> None:
        self.completed = True
        self.completed_date = today

    def mark_active(self) -> None:
        self.completed = False
        self.completed_date = None

