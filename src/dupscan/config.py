"""Runtime settings for duplicate searches, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

DEFAULT_MAX_DEPTH = 1000
DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KiB per streamed read.

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def default_workers() -> int:
    return os.cpu_count() or 1


@dataclass(slots=True)
class ScanSettings:
    """
    Tunables for a search.

    ``max_workers`` bounds both the directory-level and the file-level
    concurrency; ``max_depth`` is the deepest branch depth still explored
    (the root directory is depth 0).
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_workers: int = field(default_factory=default_workers)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    follow_symlinks: bool = True

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "ScanSettings":
        """
        Build settings from ``DUPSCAN_*`` environment variables.

        Args:
            dotenv: Load a ``.env`` file first (existing variables win)

        Returns:
            ScanSettings with defaults for every unset variable

        Raises:
            ValueError: If a variable is set to something unparseable
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        return cls(
            max_depth=_int_env("DUPSCAN_MAX_DEPTH", DEFAULT_MAX_DEPTH),
            max_workers=_int_env("DUPSCAN_MAX_WORKERS", default_workers()),
            chunk_size=_int_env("DUPSCAN_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            follow_symlinks=_bool_env("DUPSCAN_FOLLOW_SYMLINKS", True),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    token = raw.strip().lower()
    if token in _TRUE_VALUES:
        return True
    if token in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
