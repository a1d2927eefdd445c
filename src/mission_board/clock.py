"""Calendar-day clock.

Dates are handled as zero-padded ``YYYY-MM-DD`` strings throughout the
engine, so plain string comparison matches chronological order.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import date

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_date_key(value: object) -> bool:
    """True if *value* is a real calendar date written as ``YYYY-MM-DD``."""
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class Clock(ABC):
    @abstractmethod
    def today(self) -> str:
        raise NotImplementedError


class SystemClock(Clock):
    """Local calendar date of the machine."""

    def today(self) -> str:
        return date.today().isoformat()


class FixedClock(Clock):
    """Always reports the same day."""

    def __init__(self, day: str) -> None:
        if not is_date_key(day):
            raise ValueError(f"Expected a YYYY-MM-DD date, got {day!r}")
        self._day = day

    def today(self) -> str:
        return self._day

    def __repr__(self) -> str:
        return f"FixedClock({self._day!r})"
