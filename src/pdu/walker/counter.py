# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/counter.py

"""Outstanding-work counter used to detect the end of a walk."""

from threading import Condition
from typing import Optional


class WorkCounter:
    """Count of work items enqueued but not yet fully processed.

    Increment before every enqueue and decrement when an item is finished;
    the walk is complete exactly when the count returns to zero.
    """

    def __init__(self):
        self._count = 0
        self._cond = Condition()

    def add(self, n: int = 1) -> None:
        with self._cond:
            if self._count + n < 0:
                raise ValueError(f"Work counter would go negative ({self._count} + {n})")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    @property
    def value(self) -> int:
        with self._cond:
            return self._count

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the count is zero. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)
