# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/streams.py

"""Bounded, closable streams carrying walker output to consumers."""

import queue
from threading import Lock
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")

_CLOSED = object()  # end-of-stream marker


class StreamClosedError(Exception):
    """Raised when putting to a stream that has been closed."""


class Stream(Generic[T]):
    """FIFO of walker output; producers block while it is full.

    Iterating yields items until the stream is closed and drained.
    Each stream is meant to be drained by a single consumer.
    """

    def __init__(self, maxsize: int, name: str = "stream"):
        self.name = name
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._lock = Lock()
        self._closed = False

    def put(self, item: T) -> None:
        if self._closed:
            raise StreamClosedError(f"{self.name} is closed")
        self._queue.put(item)

    def close(self) -> None:
        """Signal that no more items will arrive. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # Leave the marker for any later iteration
                self._queue.put(_CLOSED)
                return
            yield item
