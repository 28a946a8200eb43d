"""Concurrent directory traversal that reports files with already-seen content."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, as_completed, wait
from dataclasses import dataclass, field
from os import PathLike
from typing import Dict, List, Optional, Set, Tuple, Union

from .config import ScanSettings
from .errors import CycleDetectedError, InvalidInputError, SearchCancelledError
from .filesystem import FileSystemProvider, LocalFileSystem
from .guard import TraversalGuard
from .hashing import HashingService
from .limiter import ConcurrencyLimiter
from .models import (
    DepthStatus,
    DirectoryVisit,
    HashResult,
    Registration,
    ScanIssue,
    SearchResult,
    VisitStatus,
)
from .registry import DuplicateRegistry

logger = logging.getLogger(__name__)

# How long the coordinator waits for a completion before re-checking cancellation.
_COORDINATOR_POLL_SECONDS = 0.05


class _SearchSignal:
    """
    Stop flag shared by all workers of one search.

    Set either by the caller's cancel event or internally when the search is
    aborted (cycle, unexpected error). Quacks like ``threading.Event`` for
    the limiter and the hashing service.
    """

    def __init__(self, cancel_event: Optional[threading.Event]) -> None:
        self._cancel_event = cancel_event
        self._abort = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    def is_set(self) -> bool:
        return self._abort.is_set() or self.cancelled

    def abort(self) -> None:
        self._abort.set()


@dataclass
class _SearchRun:
    """Fresh per-search state; never shared between two searches."""

    root: str
    signal: _SearchSignal
    registry: DuplicateRegistry
    guard: TraversalGuard
    directory_limiter: ConcurrencyLimiter
    file_pool: ThreadPoolExecutor
    issues: List[ScanIssue] = field(default_factory=list)
    counters: Dict[str, int] = field(
        default_factory=lambda: {
            "directories_visited": 0,
            "files_hashed": 0,
            "hash_failures": 0,
            "branches_skipped": 0,
        }
    )


class DuplicateSearchEngine:
    """
    Finds files whose content matches a file seen earlier in the same search.

    Each call to :meth:`search` builds its own registry, guard and worker
    pools, so one engine can serve any number of searches, sequential or
    concurrent.
    """

    def __init__(
        self,
        filesystem: Optional[FileSystemProvider] = None,
        settings: Optional[ScanSettings] = None,
        *,
        hashing_service: Optional[HashingService] = None,
    ) -> None:
        self.settings = settings or ScanSettings()
        self.filesystem = filesystem or LocalFileSystem(follow_symlinks=self.settings.follow_symlinks)
        self.hashing_service = hashing_service or HashingService(
            self.filesystem,
            max_concurrency=self.settings.max_workers,
            chunk_size=self.settings.chunk_size,
        )

    def search_duplicates(
        self,
        root: Union[str, PathLike],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[str]:
        """Return the paths of every file whose digest was already registered."""
        return self.search(root, cancel_event).duplicates

    def search(
        self,
        root: Union[str, PathLike],
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchResult:
        """
        Traverse ``root`` and collect duplicates plus the recoverable issues met on the way.

        Args:
            root: Directory to search
            cancel_event: Cooperative cancellation flag

        Returns:
            SearchResult with duplicates, issues and summary counters

        Raises:
            InvalidInputError: If ``root`` is not an existing directory
            CycleDetectedError: If a directory is reached twice
            SearchCancelledError: If ``cancel_event`` is set before the search finishes
        """
        root_path = str(root)
        if not self.filesystem.exists(root_path) or not self.filesystem.is_directory(root_path):
            raise InvalidInputError(f"Directory {root_path} does not exist", "INVALID_INPUT")

        signal = _SearchSignal(cancel_event)
        workers = self.settings.max_workers
        logger.info(f"Searching for duplicate files under {root_path} with {workers} workers")

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dupscan-dir") as directory_pool, \
                ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dupscan-file") as file_pool:
            run = _SearchRun(
                root=root_path,
                signal=signal,
                registry=DuplicateRegistry(),
                guard=TraversalGuard(self.filesystem, max_depth=self.settings.max_depth),
                directory_limiter=ConcurrencyLimiter(workers, name="directory"),
                file_pool=file_pool,
            )
            pending: Set[Future] = {directory_pool.submit(self._visit_directory, run, root_path, 0)}
            try:
                self._drain(run, directory_pool, pending)
            except BaseException:
                signal.abort()
                for future in pending:
                    future.cancel()
                raise

        duplicates = run.registry.duplicates()
        summary = dict(run.counters)
        summary["unique_files"] = run.registry.unique_count()
        summary["duplicate_files"] = len(duplicates)
        logger.info(
            f"Search of {root_path} finished: {summary['files_hashed']} files hashed, "
            f"{len(duplicates)} duplicates, {len(run.issues)} issues"
        )
        return SearchResult(root=root_path, duplicates=duplicates, issues=run.issues, summary=summary)

    def _drain(self, run: _SearchRun, directory_pool: ThreadPoolExecutor, pending: Set[Future]) -> None:
        # Consume finished directory visits and schedule their children until the worklist is empty.
        while pending:
            if run.signal.cancelled:
                logger.warning(f"Search of {run.root} cancelled")
                raise SearchCancelledError(f"Search of {run.root} was cancelled.", "CANCELLED")

            done, not_done = wait(pending, timeout=_COORDINATOR_POLL_SECONDS, return_when=FIRST_COMPLETED)
            pending.clear()
            pending.update(not_done)

            for future in done:
                visit: DirectoryVisit = future.result()
                if visit.cycle:
                    logger.critical("Directory loop detected via recursive search. Exiting execution.")
                    raise CycleDetectedError(
                        f"Directory loop detected via recursive search at {visit.path}.",
                        "CYCLE_DETECTED",
                    )
                self._collect(run, visit)
                for subdirectory in visit.subdirectories:
                    pending.add(
                        directory_pool.submit(self._visit_directory, run, subdirectory, visit.depth + 1)
                    )

        if run.signal.cancelled:
            raise SearchCancelledError(f"Search of {run.root} was cancelled.", "CANCELLED")

    def _collect(self, run: _SearchRun, visit: DirectoryVisit) -> None:
        # Only the coordinator thread touches run.issues/run.counters.
        run.counters["directories_visited"] += 1
        run.counters["files_hashed"] += visit.files_hashed
        for issue in visit.issues:
            if issue.code == "DEPTH_EXCEEDED":
                run.counters["branches_skipped"] += 1
            elif issue.code in {"HASH_FAILED", "FILE_MISSING"}:
                run.counters["hash_failures"] += 1
        run.issues.extend(visit.issues)
        if visit.duplicate_count:
            logger.debug(f"{visit.path}: {visit.duplicate_count} duplicate files at depth {visit.depth}")

    def _visit_directory(self, run: _SearchRun, directory: str, depth: int) -> DirectoryVisit:
        """Process one directory: hash its files and report which subdirectories to descend into."""
        with run.directory_limiter.slot(run.signal):
            visit = DirectoryVisit(path=directory, depth=depth)

            if run.guard.mark_visited(directory) is VisitStatus.ALREADY_VISITED:
                visit.cycle = True
                return visit

            try:
                files = self.filesystem.list_files(directory)
            except OSError as exc:
                logger.warning(f"Directory {directory} could not be listed. Error: {exc}")
                visit.issues.append(ScanIssue(path=directory, code="LIST_FAILED", message=str(exc)))
                return visit

            self._hash_files(run, files, visit)

            try:
                subdirectories = self.filesystem.list_subdirectories(directory)
            except OSError as exc:
                logger.warning(f"Subdirectories of {directory} could not be listed. Error: {exc}")
                visit.issues.append(ScanIssue(path=directory, code="LIST_FAILED", message=str(exc)))
                return visit

            child_depth = depth + 1
            for subdirectory in subdirectories:
                if run.guard.check_depth(child_depth) is DepthStatus.EXCEEDED:
                    logger.critical(
                        f"Maximum depth {run.guard.max_depth} exceeded at {subdirectory}; skipping branch."
                    )
                    visit.issues.append(
                        ScanIssue(
                            path=subdirectory,
                            code="DEPTH_EXCEEDED",
                            message=f"Depth {child_depth} exceeds the limit of {run.guard.max_depth}.",
                        )
                    )
                    continue
                visit.subdirectories.append(subdirectory)

            return visit

    def _hash_files(self, run: _SearchRun, files: List[str], visit: DirectoryVisit) -> None:
        futures = [run.file_pool.submit(self._hash_and_register, run, path) for path in files]
        for future in as_completed(futures):
            result, registration = future.result()
            if not result.ok:
                visit.issues.append(
                    ScanIssue(path=result.path, code=result.code or "HASH_FAILED", message=result.error or "")
                )
                continue
            visit.files_hashed += 1
            if registration is Registration.DUPLICATE:
                visit.duplicate_count += 1

    def _hash_and_register(
        self, run: _SearchRun, path: str
    ) -> Tuple[HashResult, Optional[Registration]]:
        if run.signal.is_set():
            raise SearchCancelledError(f"Search of {run.root} stopped before hashing {path}.", "CANCELLED")
        result = self.hashing_service.hash(path, run.signal)
        if not result.ok:
            return result, None
        registration = run.registry.register(result.digest, path)
        if registration is Registration.DUPLICATE:
            logger.debug(f"Duplicate content: {path}")
        return result, registration
