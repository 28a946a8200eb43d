"""Filesystem surface used by the search engine."""

from __future__ import annotations

import os
from typing import BinaryIO, List, Protocol


class FileSystemProvider(Protocol):
    """Everything the engine needs from a filesystem, and nothing more."""

    def exists(self, path: str) -> bool: ...

    def is_directory(self, path: str) -> bool: ...

    def list_files(self, directory: str) -> List[str]: ...

    def list_subdirectories(self, directory: str) -> List[str]: ...

    def open_for_sequential_read(self, path: str) -> BinaryIO: ...

    def canonical(self, path: str) -> str: ...


class LocalFileSystem:
    """
    FileSystemProvider backed by the local disk.

    With ``follow_symlinks`` enabled, symlinked directories are descended
    into; their canonical path is the resolved target, so a link pointing
    back at an ancestor is reported as a cycle.
    """

    def __init__(self, follow_symlinks: bool = True) -> None:
        self.follow_symlinks = follow_symlinks

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_directory(self, path: str) -> bool:
        return os.path.isdir(path)

    def list_files(self, directory: str) -> List[str]:
        files: List[str] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if entry.is_file(follow_symlinks=self.follow_symlinks):
                        files.append(os.path.join(directory, entry.name))
                except OSError:
                    # Broken entry; it cannot be hashed either.
                    continue
        return files

    def list_subdirectories(self, directory: str) -> List[str]:
        subdirectories: List[str] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=self.follow_symlinks):
                        subdirectories.append(os.path.join(directory, entry.name))
                except OSError:
                    continue
        return subdirectories

    def open_for_sequential_read(self, path: str) -> BinaryIO:
        return open(path, mode="rb")

    def canonical(self, path: str) -> str:
        return os.path.normcase(os.path.realpath(path))
