"""
Pytest configuration and fixtures
"""
from __future__ import annotations

import io
import posixpath
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

import pytest


class _TrackingStream(io.BytesIO):
    """BytesIO that reports open/close/read activity back to its filesystem."""

    def __init__(self, content: bytes, owner: "FakeFileSystem") -> None:
        super().__init__(content)
        self._owner = owner
        self._owner._stream_opened()

    def read(self, size: int = -1) -> bytes:
        self._owner.read_sizes.append(size)
        if self._owner.read_delay:
            time.sleep(self._owner.read_delay)
        return super().read(size)

    def close(self) -> None:
        if not self.closed:
            self._owner._stream_closed()
        super().close()


class FakeFileSystem:
    """In-memory FileSystemProvider used to build trees the disk cannot express cheaply."""

    def __init__(self, root: str = "/root") -> None:
        self.root = root
        self._files: Dict[str, bytes] = {}
        self._child_files: Dict[str, List[str]] = {}
        self._child_dirs: Dict[str, List[str]] = {}
        self.aliases: Dict[str, str] = {}
        self.unreadable: Set[str] = set()
        self.vanishing: Set[str] = set()
        self.on_open: Optional[Callable[[str], None]] = None
        self.read_delay = 0.0
        self.read_sizes: List[int] = []
        self.list_calls = 0
        self.list_delay = 0.0
        self.peak_listing = 0
        self._listing_now = 0
        self.opened = 0
        self.peak_open = 0
        self._open_now = 0
        self._lock = threading.Lock()
        self.add_dir(root)

    def add_dir(self, path: str) -> str:
        # Walk up to the first known ancestor, then create top-down.
        missing: List[str] = []
        current = path
        while current not in self._child_dirs:
            missing.append(current)
            parent = posixpath.dirname(current)
            if current == self.root or not parent or parent == current:
                break
            current = parent
        for directory in reversed(missing):
            parent = posixpath.dirname(directory)
            if directory != self.root and parent in self._child_dirs:
                self._child_dirs[parent].append(directory)
            self._child_dirs[directory] = []
            self._child_files[directory] = []
        return path

    def add_file(self, path: str, content: bytes) -> str:
        self.add_dir(posixpath.dirname(path))
        if path not in self._files:
            self._child_files[posixpath.dirname(path)].append(path)
        self._files[path] = content
        return path

    def _stream_opened(self) -> None:
        with self._lock:
            self.opened += 1
            self._open_now += 1
            self.peak_open = max(self.peak_open, self._open_now)

    def _stream_closed(self) -> None:
        with self._lock:
            self._open_now -= 1

    # FileSystemProvider

    def exists(self, path: str) -> bool:
        return path in self._files or path in self._child_dirs

    def is_directory(self, path: str) -> bool:
        return path in self._child_dirs

    def list_files(self, directory: str) -> List[str]:
        with self._lock:
            self.list_calls += 1
            self._listing_now += 1
            self.peak_listing = max(self.peak_listing, self._listing_now)
        try:
            if self.list_delay:
                time.sleep(self.list_delay)
            return list(self._child_files[directory])
        finally:
            with self._lock:
                self._listing_now -= 1

    def list_subdirectories(self, directory: str) -> List[str]:
        return list(self._child_dirs[directory])

    def open_for_sequential_read(self, path: str):
        if self.on_open is not None:
            self.on_open(path)
        if path in self.unreadable:
            raise PermissionError(13, "Permission denied", path)
        if path in self.vanishing:
            raise FileNotFoundError(2, "No such file or directory", path)
        return _TrackingStream(self._files[path], self)

    def canonical(self, path: str) -> str:
        return self.aliases.get(path, path)


def build_tree(base: Path, fanout: int, depth: int, content: str = "same content") -> int:
    """
    Create ``fanout`` subdirectories per level down to ``depth`` levels and
    put one file with ``content`` in every leaf. Returns the number of files.
    """
    if depth == 0:
        (base / "leaf.txt").write_text(content)
        return 1
    created = 0
    for index in range(1, fanout + 1):
        child = base / f"{base.name}.{index}"
        child.mkdir()
        created += build_tree(child, fanout, depth - 1, content)
    return created


@pytest.fixture
def fake_fs() -> FakeFileSystem:
    return FakeFileSystem()


@pytest.fixture
def scan_root(tmp_path: Path) -> Path:
    root = tmp_path / "TopFolder"
    root.mkdir()
    return root
