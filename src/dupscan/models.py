from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Registration(Enum):
    UNIQUE = "unique"
    DUPLICATE = "duplicate"


class VisitStatus(Enum):
    FIRST_VISIT = "first_visit"
    ALREADY_VISITED = "already_visited"


class DepthStatus(Enum):
    CONTINUE = "continue"
    EXCEEDED = "exceeded"


@dataclass(slots=True)
class HashResult:
    """Outcome of hashing a single file; exactly one of digest/error is set."""

    path: str
    digest: Optional[str] = None
    error: Optional[str] = None
    code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.digest is not None


@dataclass(slots=True)
class ScanIssue:
    path: str
    code: str
    message: str


@dataclass(slots=True)
class DirectoryVisit:
    """
    Result of processing one directory work item.

    The coordinator reads ``subdirectories`` to schedule the next level and
    ``cycle`` to decide whether the whole search has to stop.
    """

    path: str
    depth: int
    subdirectories: List[str] = field(default_factory=list)
    files_hashed: int = 0
    duplicate_count: int = 0
    issues: List[ScanIssue] = field(default_factory=list)
    cycle: bool = False


@dataclass(slots=True)
class SearchResult:
    root: str
    duplicates: List[str] = field(default_factory=list)
    issues: List[ScanIssue] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicates)
