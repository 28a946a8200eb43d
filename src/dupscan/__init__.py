"""
Duplicate file search.

Walks a directory tree with bounded concurrency, hashes every file with
SHA-256 and reports the paths whose content was already seen.
"""

from .config import ScanSettings
from .engine import DuplicateSearchEngine
from .errors import CycleDetectedError, InvalidInputError, ScanError, SearchCancelledError
from .filesystem import FileSystemProvider, LocalFileSystem
from .guard import TraversalGuard
from .hashing import HashingService
from .models import SearchResult
from .registry import DuplicateRegistry

__all__ = [
    "CycleDetectedError",
    "DuplicateRegistry",
    "DuplicateSearchEngine",
    "FileSystemProvider",
    "HashingService",
    "InvalidInputError",
    "LocalFileSystem",
    "ScanError",
    "ScanSettings",
    "SearchCancelledError",
    "SearchResult",
    "TraversalGuard",
]
