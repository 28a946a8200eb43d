from __future__ import annotations

import hashlib
import logging
import threading
from typing import Optional

from .config import DEFAULT_CHUNK_SIZE, default_workers
from .errors import SearchCancelledError
from .filesystem import FileSystemProvider, LocalFileSystem
from .limiter import ConcurrencyLimiter
from .models import HashResult

logger = logging.getLogger(__name__)


class HashingService:
    """Streams file content through SHA-256 with bounded concurrency."""

    def __init__(
        self,
        filesystem: Optional[FileSystemProvider] = None,
        *,
        max_concurrency: Optional[int] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.filesystem = filesystem or LocalFileSystem()
        self.chunk_size = chunk_size
        capacity = default_workers() if max_concurrency is None else max_concurrency
        self.limiter = ConcurrencyLimiter(capacity, name="file")

    def hash(self, path: str, cancel_event: Optional[threading.Event] = None) -> HashResult:
        """
        Compute the hex SHA-256 digest of ``path``.

        Reads ``chunk_size`` bytes at a time so large files never sit in
        memory whole. I/O failures are returned, not raised: the caller gets
        a HashResult with ``error`` set and the file is simply left out.

        Args:
            path: File to hash
            cancel_event: Checked while waiting for a slot and before every chunk

        Returns:
            HashResult with either ``digest`` or ``error``/``code`` populated

        Raises:
            SearchCancelledError: If ``cancel_event`` is set before hashing completes
        """
        if not self.filesystem.exists(path):
            logger.warning(f"File {path} does not exist.")
            return HashResult(path=path, error="File does not exist.", code="FILE_MISSING")

        with self.limiter.slot(cancel_event):
            try:
                return HashResult(path=path, digest=self._digest(path, cancel_event))
            except FileNotFoundError as exc:
                logger.warning(f"File {path} disappeared before it could be hashed.")
                return HashResult(path=path, error=str(exc), code="FILE_MISSING")
            except OSError as exc:
                logger.error(f"File {path} could not be hashed. Error: {exc}")
                return HashResult(path=path, error=str(exc), code="HASH_FAILED")

    def _digest(self, path: str, cancel_event: Optional[threading.Event]) -> str:
        hasher = hashlib.sha256()
        with self.filesystem.open_for_sequential_read(path) as stream:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    raise SearchCancelledError(f"Cancelled while hashing {path}.", "CANCELLED")
                chunk = stream.read(self.chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
        return hasher.hexdigest()
