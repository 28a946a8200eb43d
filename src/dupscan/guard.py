from __future__ import annotations

from threading import Lock
from typing import Optional, Set

from .config import DEFAULT_MAX_DEPTH
from .filesystem import FileSystemProvider, LocalFileSystem
from .models import DepthStatus, VisitStatus


class TraversalGuard:
    """Visited-directory set for cycle detection and the per-branch depth limit."""

    def __init__(
        self,
        filesystem: Optional[FileSystemProvider] = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.filesystem = filesystem or LocalFileSystem()
        self.max_depth = max_depth
        self._visited: Set[str] = set()
        self._lock = Lock()

    def mark_visited(self, path: str) -> VisitStatus:
        # Resolve outside the lock; canonical() may touch the disk.
        key = self.filesystem.canonical(path)
        with self._lock:
            if key in self._visited:
                return VisitStatus.ALREADY_VISITED
            self._visited.add(key)
        return VisitStatus.FIRST_VISIT

    def check_depth(self, depth: int) -> DepthStatus:
        if depth > self.max_depth:
            return DepthStatus.EXCEEDED
        return DepthStatus.CONTINUE

    def visited_count(self) -> int:
        with self._lock:
            return len(self._visited)

    def reset(self) -> None:
        with self._lock:
            self._visited.clear()
