"""Authoritative in-memory task collection.

:class:`TaskStore` owns the ordered list of tasks (active and archived alike)
and is the only component that mutates it. The collection is hydrated from a
:class:`~mission_board.task_engine.persistence.PersistenceGateway` once, and
every successful mutation is flushed back through the same gateway.

Operations that reference an unknown task id return ``None`` / ``False`` and
leave the collection and the durable state untouched.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Optional, Union

from loguru import logger

from ..clock import Clock, SystemClock, is_date_key
from .errors import CorruptStateError, TaskValidationError
from .model import Task, TaskPriority, _generate_id
from .persistence import PersistenceGateway


class ReorderPlacement(str, Enum):
    """Where the moved task lands relative to the reference task."""

    BEFORE = "before"
    AFTER = "after"


# ---------------------------------------------------------------------------
# Input checks
# ---------------------------------------------------------------------------

def _clean_text(text: str) -> str:
    cleaned = text.strip() if isinstance(text, str) else ""
    if not cleaned:
        raise TaskValidationError("Task text must not be empty")
    return cleaned


def _coerce_priority(priority: Union[TaskPriority, str]) -> TaskPriority:
    if isinstance(priority, TaskPriority):
        return priority
    try:
        return TaskPriority(str(priority).lower())
    except ValueError:
        raise TaskValidationError(
            f"Priority must be one of {[p.value for p in TaskPriority]}, got {priority!r}"
        ) from None


def _clean_due_date(due_date: Optional[str]) -> Optional[str]:
    if not due_date:
        return None
    if not is_date_key(due_date):
        raise TaskValidationError(f"Due date must be YYYY-MM-DD, got {due_date!r}")
    return due_date


def _coerce_placement(place: Union[ReorderPlacement, str]) -> ReorderPlacement:
    try:
        return ReorderPlacement(place)
    except ValueError:
        raise TaskValidationError(f"Placement must be 'before' or 'after', got {place!r}") from None


# ---------------------------------------------------------------------------
# TaskStore
# ---------------------------------------------------------------------------

class TaskStore:
    """Own the ordered task collection and persist every change.

    Parameters
    ----------
    gateway:
        Where the collection is loaded from and saved to.
    clock:
        Source of "today" for completion stamps (defaults to the local date).
    """

    def __init__(self, gateway: PersistenceGateway, clock: Optional[Clock] = None) -> None:
        self._gateway = gateway
        self._clock = clock or SystemClock()
        self._tasks: list[Task] = self._hydrate()

    # -- internal helpers ---------------------------------------------------

    def _hydrate(self) -> list[Task]:
        try:
            tasks = self._gateway.load()
        except CorruptStateError as exc:
            logger.warning("Stored tasks are unreadable ({}); starting with an empty board", exc)
            return []
        logger.info("TaskStore ready: {} tasks", len(tasks))
        return tasks

    def _index_of(self, task_id: str) -> Optional[int]:
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                return idx
        return None

    def _new_id(self) -> str:
        existing = {t.id for t in self._tasks}
        task_id = _generate_id()
        while task_id in existing:
            task_id = _generate_id()
        return task_id

    def _persist(self) -> None:
        # The in-memory change stands even when the write fails.
        try:
            self._gateway.save(list(self._tasks))
        except OSError:
            logger.exception("Failed to persist {} tasks; keeping in-memory state", len(self._tasks))

    # -- reads --------------------------------------------------------------

    def all(self) -> list[Task]:
        """Ordered snapshot; the returned tasks are copies."""
        return [replace(t) for t in self._tasks]

    def get(self, task_id: str) -> Optional[Task]:
        idx = self._index_of(task_id)
        return replace(self._tasks[idx]) if idx is not None else None

    def __len__(self) -> int:
        return len(self._tasks)

    # -- mutations ----------------------------------------------------------

    def create(
        self,
        text: str,
        priority: Union[TaskPriority, str] = TaskPriority.MEDIUM,
        due_date: Optional[str] = None,
    ) -> Task:
        """Create a task at the front of the collection and persist it."""
        task = Task(
            id=self._new_id(),
            text=_clean_text(text),
            priority=_coerce_priority(priority),
            due_date=_clean_due_date(due_date),
        )
        self._tasks.insert(0, task)
        self._persist()
        logger.debug("Created task {} ({})", task.id, task.priority.value)
        return replace(task)

    def edit(
        self,
        task_id: str,
        new_text: str,
        new_priority: Union[TaskPriority, str],
        new_due_date: Optional[str],
    ) -> Optional[Task]:
        """Replace text, priority and due date; completion is left alone."""
        idx = self._index_of(task_id)
        if idx is None:
            return None
        text = _clean_text(new_text)
        priority = _coerce_priority(new_priority)
        due_date = _clean_due_date(new_due_date)

        task = self._tasks[idx]
        task.text = text
        task.priority = priority
        task.due_date = due_date
        self._persist()
        logger.debug("Edited task {}", task_id)
        return replace(task)

    def delete(self, task_id: str) -> bool:
        """Remove a task permanently, active or archived."""
        idx = self._index_of(task_id)
        if idx is None:
            return False
        self._tasks.pop(idx)
        self._persist()
        logger.debug("Deleted task {}", task_id)
        return True

    def toggle_completion(self, task_id: str) -> Optional[Task]:
        """Flip completion, stamping or clearing the completion date."""
        idx = self._index_of(task_id)
        if idx is None:
            return None
        task = self._tasks[idx]
        if task.completed:
            task.mark_active()
        else:
            task.mark_completed(self._clock.today())
        self._persist()
        if task.completed:
            logger.info("Mission complete: {} ({})", task.text, task.id)
        else:
            logger.debug("Reopened task {}", task_id)
        return replace(task)

    def reorder(
        self,
        moved_id: str,
        reference_id: str,
        place: Union[ReorderPlacement, str] = ReorderPlacement.BEFORE,
    ) -> bool:
        """Move one task next to another, keeping everything else in order.

        Only active tasks can be reordered; the archive has no manual order.
        """
        placement = _coerce_placement(place)
        moved_idx = self._index_of(moved_id)
        ref_idx = self._index_of(reference_id)
        if moved_idx is None or ref_idx is None:
            return False
        if self._tasks[moved_idx].completed or self._tasks[ref_idx].completed:
            raise TaskValidationError("Archived tasks cannot be reordered")
        if moved_id == reference_id:
            return True

        task = self._tasks.pop(moved_idx)
        if moved_idx < ref_idx:
            ref_idx -= 1
        insert_at = ref_idx if placement is ReorderPlacement.BEFORE else ref_idx + 1
        self._tasks.insert(insert_at, task)
        self._persist()
        logger.debug("Moved task {} {} {}", moved_id, placement.value, reference_id)
        return True
