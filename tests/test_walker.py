"""
Tests for FileWalker and the sizing/reading helpers

Depth is counted from the root (depth 0); excluded directories and
symlinked directories are never entered; unreadable entries become
skips instead of errors.
"""

import os
import sys

import pytest

from tidyup.core.finding import SkipLog, SkipReason
from tidyup.core.walker import (
    FileWalker, directory_size, file_size, path_size, read_bytes, read_text, relpath, sum_sizes
)


class TestDepth:

    def test_depth_bound(self, project):
        project.file("top.log")
        project.file("a/one.log")
        project.file("a/b/two.log")
        project.file("a/b/c/three.log")

        walker = FileWalker(project.root)
        found = [relpath(project.root, p) for p in walker.files(2, extensions=(".log",))]

        assert found == ["a/b/two.log", "a/one.log", "top.log"]

    def test_depth_zero_is_root_only(self, project):
        project.file("top.log")
        project.file("a/one.log")
        walker = FileWalker(project.root)
        assert [p.name for p in walker.files(0, extensions=(".log",))] == ["top.log"]

    def test_walk_reports_depth(self, project):
        project.file("a/b/x.txt")
        depths = {relpath(project.root, d) or ".": depth for d, _, _, depth in FileWalker(project.root).walk(5)}
        assert depths == {".": 0, "a": 1, "a/b": 2}


class TestExclusions:

    def test_default_exclusions_not_entered(self, project):
        project.file("node_modules/pkg/readme.log")
        project.file(".git/logs/HEAD.log")
        project.file("dist/app.log")
        project.file("src/app.log")

        found = [relpath(project.root, p) for p in FileWalker(project.root).files(10, extensions=(".log",))]
        assert found == ["src/app.log"]

    def test_custom_exclusions(self, project):
        project.file("vendor/x.log")
        project.file("dist/y.log")
        walker = FileWalker(project.root, exclude_dirs=["vendor"])
        found = [relpath(project.root, p) for p in walker.files(5, extensions=(".log",))]
        assert found == ["dist/y.log"]

    def test_per_call_exclusions_override(self, project):
        project.file("dist/y.log")
        walker = FileWalker(project.root)
        assert walker.files(5, extensions=(".log",), exclude_dirs=[]) == [project.root / "dist" / "y.log"]

    def test_symlinked_directories_not_followed(self, project, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.log").write_text("x")
        os.symlink(outside, project.root / "link")

        assert FileWalker(project.root).files(5, extensions=(".log",)) == []


class TestQueries:

    def test_suffix_and_name_matching(self, project):
        project.file("notes.txt~")
        project.file(".DS_Store")
        project.file("keep.txt")

        walker = FileWalker(project.root)
        assert [p.name for p in walker.files(3, extensions=("~",))] == ["notes.txt~"]
        assert [p.name for p in walker.files(3, names=(".DS_Store",))] == [".DS_Store"]

    def test_results_sorted(self, project):
        for name in ("c.tmp", "a.tmp", "b.tmp"):
            project.file(name)
        assert [p.name for p in FileWalker(project.root).all_files(1)] == ["a.tmp", "b.tmp", "c.tmp"]

    def test_directories_skip_hidden(self, project):
        project.dir(".cache/inner")
        project.dir("src/lib")
        walker = FileWalker(project.root)

        all_dirs = [relpath(project.root, d) for d in walker.directories(3)]
        visible = [relpath(project.root, d) for d in walker.directories(3, skip_hidden=True)]

        assert ".cache" in all_dirs
        assert ".cache" not in visible
        assert visible == ["src", "src/lib"]


@pytest.mark.skipif(sys.platform == "win32" or os.geteuid() == 0,
                    reason="Permission bits are not enforced here")
class TestResilience:

    def test_unreadable_directory_is_skipped(self, project):
        project.file("ok/a.log")
        locked = project.dir("locked")
        project.file("locked/b.log")
        locked.chmod(0)
        try:
            skips = SkipLog()
            found = FileWalker(project.root, skips=skips).files(5, extensions=(".log",))
        finally:
            locked.chmod(0o755)

        assert [p.name for p in found] == ["a.log"]
        assert skips.reasons_for(locked) == [SkipReason.PERMISSION_DENIED]


class TestSizing:

    def test_directory_size_counts_bytes(self, project):
        project.file("d/a.bin", size=1000)
        project.file("d/sub/b.bin", size=24)
        assert directory_size(project.root / "d") == 1024

    def test_path_size_file_or_dir(self, project):
        f = project.file("d/a.bin", size=10)
        assert path_size(f) == 10
        assert path_size(project.root / "d") == 10

    def test_missing_file_is_zero_and_recorded(self, project):
        skips = SkipLog()
        assert file_size(project.root / "gone.txt", skips) == 0
        assert skips.reasons_for(project.root / "gone.txt") == [SkipReason.VANISHED]

    def test_sum_sizes(self, project):
        paths = [project.file("a", size=3), project.file("b", size=4)]
        assert sum_sizes(paths) == 7


class TestReading:

    def test_read_text(self, project):
        path = project.file("a.md", "hello")
        assert read_text(path) == "hello"

    def test_too_large(self, project):
        path = project.file("big.md", size=100)
        skips = SkipLog()
        assert read_text(path, skips, max_bytes=50) is None
        assert skips.reasons_for(path) == [SkipReason.TOO_LARGE]

    def test_undecodable(self, project):
        path = project.file("bin.py", b"\xff\xfe\x00bad")
        skips = SkipLog()
        assert read_text(path, skips) is None
        assert skips.reasons_for(path) == [SkipReason.UNDECODABLE]

    def test_read_bytes_prefix(self, project):
        path = project.file("a.bin", b"0123456789")
        assert read_bytes(path, 4) == b"0123"


def test_relpath_is_posix(project):
    assert relpath(project.root, project.root / "a" / "b.txt") == "a/b.txt"
