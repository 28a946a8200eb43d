from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from .errors import SearchCancelledError

# How often a waiting thread re-checks the cancellation event.
_POLL_INTERVAL_SECONDS = 0.05


class ConcurrencyLimiter:
    """Counting limiter whose waiters give up when a cancel event is set."""

    def __init__(self, capacity: int, name: str = "limiter") -> None:
        if capacity < 1:
            raise ValueError(f"{name} capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.name = name
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._active = 0
        self._active_lock = threading.Lock()

    @property
    def active(self) -> int:
        with self._active_lock:
            return self._active

    def acquire(self, cancel_event: Optional[threading.Event] = None) -> None:
        """Block until a slot frees up; raise SearchCancelledError if cancelled meanwhile."""
        if cancel_event is None:
            self._semaphore.acquire()
        else:
            while not self._semaphore.acquire(timeout=_POLL_INTERVAL_SECONDS):
                if cancel_event.is_set():
                    raise SearchCancelledError(
                        f"Cancelled while waiting for a {self.name} slot.", "CANCELLED"
                    )
            if cancel_event.is_set():
                self._semaphore.release()
                raise SearchCancelledError(
                    f"Cancelled while waiting for a {self.name} slot.", "CANCELLED"
                )
        with self._active_lock:
            self._active += 1

    def release(self) -> None:
        with self._active_lock:
            self._active -= 1
        self._semaphore.release()

    @contextmanager
    def slot(self, cancel_event: Optional[threading.Event] = None) -> Iterator[None]:
        self.acquire(cancel_event)
        try:
            yield
        finally:
            self.release()
