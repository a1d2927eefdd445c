"""Persistence gateways for the task collection.

A gateway stores the whole ordered collection under one key and hands it
back unchanged: ``load()`` after ``save(tasks)`` returns equal tasks in the
same order.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from ..constants import TASKS_KEY
from ..io_utils import JsonSlotFile
from .errors import CorruptStateError
from .model import Task


def _encode(tasks: list[Task]) -> list[dict[str, Any]]:
    return [t.to_dict() for t in tasks]


def _decode(raw: Any, path: Optional[Path] = None) -> tuple[list[Task], int]:
    """Validate and convert stored records.

    Returns ``(tasks, skipped)``. A record that fails validation, or repeats
    an earlier id, is dropped with a warning; the rest of the collection is
    kept. Only a ``tasks`` value that is not an array is fatal.
    """
    if raw is None:
        return [], 0
    if not isinstance(raw, list):
        raise CorruptStateError(f"'{TASKS_KEY}' must be an array, got {type(raw).__name__}", path)
    tasks: list[Task] = []
    seen: set[str] = set()
    skipped = 0
    for idx, record in enumerate(raw):
        errors = Task.validate_dict(record)
        if not errors and record["id"] in seen:
            errors = [f"duplicate id {record['id']!r}"]
        if errors:
            logger.warning("Skipping stored task record {}: {}", idx, "; ".join(errors))
            skipped += 1
            continue
        task = Task.from_dict(record)
        seen.add(task.id)
        tasks.append(task)
    return tasks, skipped


class PersistenceGateway(ABC):
    @abstractmethod
    def save(self, tasks: list[Task]) -> None:
        raise NotImplementedError

    @abstractmethod
    def load(self) -> list[Task]:
        raise NotImplementedError


class JsonFileGateway(PersistenceGateway):
    """Keeps the collection under the ``tasks`` key of a JSON slot file."""

    def __init__(self, path: Path) -> None:
        self.slot = JsonSlotFile(path)

    @property
    def path(self) -> Path:
        return self.slot.path

    def save(self, tasks: list[Task]) -> None:
        self.slot.put(TASKS_KEY, _encode(tasks))
        logger.debug("Saved {} tasks to {}", len(tasks), self.path)

    def load(self) -> list[Task]:
        try:
            data = self.slot.read()
            tasks, skipped = _decode(data.get(TASKS_KEY), self.path)
        except CorruptStateError:
            backup = self.slot.quarantine()
            if backup is not None:
                logger.warning("Copied unreadable task state to {}", backup)
            raise
        if skipped:
            # The next save drops the skipped records from the slot file.
            backup = self.slot.quarantine()
            if backup is not None:
                logger.warning("Copied task state with {} skipped record(s) to {}", skipped, backup)
        return tasks


class InMemoryGateway(PersistenceGateway):
    """Process-local gateway holding the encoded payload."""

    def __init__(self, records: Optional[list[dict[str, Any]]] = None) -> None:
        self.records: Optional[list[dict[str, Any]]] = copy.deepcopy(records)
        self.save_count = 0

    def save(self, tasks: list[Task]) -> None:
        self.records = _encode(tasks)
        self.save_count += 1

    def load(self) -> list[Task]:
        tasks, _ = _decode(copy.deepcopy(self.records))
        return tasks
