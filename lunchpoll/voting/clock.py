"""Logical clocks for deadline evaluation.

The poll never schedules anything. It asks its clock for the current
time only when a vote is attempted or voting starts.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the current logical time in seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Wall-clock time from time.time()."""

    def now(self) -> float:
        return time.time()


class ManualClock:
    """Clock that only moves when told to. Used by scenarios and tests."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += seconds
        return self._now
