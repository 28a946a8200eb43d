"""Tests for cycle detection and the depth limit."""

from __future__ import annotations

import threading
from pathlib import Path

from conftest import FakeFileSystem
from dupscan.guard import TraversalGuard
from dupscan.models import DepthStatus, VisitStatus


class TestMarkVisited:
    def test_first_and_repeat_visit(self, tmp_path: Path):
        guard = TraversalGuard()

        assert guard.mark_visited(str(tmp_path)) is VisitStatus.FIRST_VISIT
        assert guard.mark_visited(str(tmp_path)) is VisitStatus.ALREADY_VISITED
        assert guard.visited_count() == 1

    def test_equivalent_paths_are_the_same_directory(self, tmp_path: Path):
        child = tmp_path / "child"
        child.mkdir()
        guard = TraversalGuard()

        guard.mark_visited(str(child))

        assert guard.mark_visited(str(tmp_path / "child" / ".." / "child")) is VisitStatus.ALREADY_VISITED

    def test_canonical_path_comes_from_filesystem(self, fake_fs: FakeFileSystem):
        fake_fs.add_dir("/root/a")
        fake_fs.add_dir("/root/b")
        fake_fs.aliases["/root/b"] = "/root/a"
        guard = TraversalGuard(fake_fs)

        assert guard.mark_visited("/root/a") is VisitStatus.FIRST_VISIT
        assert guard.mark_visited("/root/b") is VisitStatus.ALREADY_VISITED

    def test_concurrent_visits_admit_exactly_one(self, fake_fs: FakeFileSystem):
        guard = TraversalGuard(fake_fs)
        results = []
        barrier = threading.Barrier(16)

        def worker() -> None:
            barrier.wait()
            results.append(guard.mark_visited("/root"))

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(VisitStatus.FIRST_VISIT) == 1
        assert results.count(VisitStatus.ALREADY_VISITED) == 15

    def test_reset_forgets_visits(self, fake_fs: FakeFileSystem):
        guard = TraversalGuard(fake_fs)
        guard.mark_visited("/root")

        guard.reset()

        assert guard.visited_count() == 0
        assert guard.mark_visited("/root") is VisitStatus.FIRST_VISIT


class TestCheckDepth:
    def test_default_limit_is_1000(self):
        guard = TraversalGuard()

        assert guard.max_depth == 1000
        assert guard.check_depth(1000) is DepthStatus.CONTINUE
        assert guard.check_depth(1001) is DepthStatus.EXCEEDED

    def test_custom_limit(self, fake_fs: FakeFileSystem):
        guard = TraversalGuard(fake_fs, max_depth=2)

        assert guard.check_depth(0) is DepthStatus.CONTINUE
        assert guard.check_depth(2) is DepthStatus.CONTINUE
        assert guard.check_depth(3) is DepthStatus.EXCEEDED
