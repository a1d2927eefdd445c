"""Derived views over the task collection.

Everything here is a pure function of ``(collection, mode, today)``: the
input tasks are never modified and no state is kept between calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .model import PRIORITY_RANK, Task


class ViewMode(str, Enum):
    ACTIVE = "active"
    ARCHIVE = "archive"


@dataclass(frozen=True)
class Projection:
    """Ordered tasks for one view plus board-wide stats."""

    items: tuple[Task, ...]
    completion_percentage: int
    overdue_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [t.to_dict() for t in self.items],
            "completionPercentage": self.completion_percentage,
            "overdueCount": self.overdue_count,
        }


def _priority_rank(priority: Any) -> int:
    return PRIORITY_RANK.get(getattr(priority, "value", priority), 0)


def is_overdue(task: Task, today: str) -> bool:
    return task.due_date is not None and task.due_date < today and not task.completed


def completion_percentage(tasks: Sequence[Task]) -> int:
    """Share of completed tasks over the whole collection, rounded half up."""
    total = len(tasks)
    if total == 0:
        return 0
    done = sum(1 for t in tasks if t.completed)
    return (200 * done + total) // (2 * total)


def overdue_count(tasks: Iterable[Task], today: str) -> int:
    return sum(1 for t in tasks if is_overdue(t, today))


def _active_key(today: str):
    def key(task: Task) -> tuple[bool, int, bool, str]:
        return (
            not is_overdue(task, today),
            -_priority_rank(task.priority),
            task.due_date is None,
            task.due_date or "",
        )

    return key


def sort_active(tasks: Iterable[Task], today: str) -> list[Task]:
    """Overdue first, then priority, then earliest due date; stable otherwise."""
    return sorted(tasks, key=_active_key(today))


def sort_archive(tasks: Iterable[Task]) -> list[Task]:
    """Most recently completed first; a missing completion date sorts last."""
    return sorted(tasks, key=lambda t: t.completed_date or "", reverse=True)


class ViewProjector:
    """Build the active worklist or the archive from a task collection."""

    @staticmethod
    def project(
        collection: Sequence[Task],
        mode: Union[ViewMode, str],
        today: str,
    ) -> Projection:
        view = ViewMode(mode)
        if view is ViewMode.ACTIVE:
            items = sort_active((t for t in collection if not t.completed), today)
        else:
            items = sort_archive(t for t in collection if t.completed)
        return Projection(
            items=tuple(items),
            completion_percentage=completion_percentage(collection),
            overdue_count=overdue_count(collection, today),
        )
