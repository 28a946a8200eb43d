from __future__ import annotations

from threading import Lock
from typing import List, Set

from .models import Registration


class DuplicateRegistry:
    """
    Thread-safe digest set plus the list of paths whose digest was already known.

    Which of two identical files ends up in the duplicate list depends on
    which registration lands second; only the count is deterministic.
    """

    def __init__(self) -> None:
        self._digests: Set[str] = set()
        self._duplicates: List[str] = []
        self._lock = Lock()

    def register(self, digest: str, path: str) -> Registration:
        with self._lock:
            if digest in self._digests:
                self._duplicates.append(path)
                return Registration.DUPLICATE
            self._digests.add(digest)
            return Registration.UNIQUE

    def duplicates(self) -> List[str]:
        """Snapshot of duplicate paths in registration order."""
        with self._lock:
            return list(self._duplicates)

    def unique_count(self) -> int:
        with self._lock:
            return len(self._digests)

    def reset(self) -> None:
        with self._lock:
            self._digests.clear()
            self._duplicates.clear()
