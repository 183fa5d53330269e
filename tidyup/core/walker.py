"""
FileWalker — Bounded-depth directory traversal

Foundation for every detector. Traversal is:
- Bounded: the root is depth 0, directories deeper than max_depth are not entered
- Deterministic: entries are visited in name order
- Resilient: an unreadable entry is recorded in the SkipLog and skipped,
  siblings are still visited

Default exclusions keep version-control metadata, dependency trees and
build output out of every sweep. Depth presets are a cost/coverage knob
(see ScanSettings), not fixed constants.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .finding import SkipLog, SkipReason

logger = logging.getLogger(__name__)


DEFAULT_EXCLUDE_DIRS: Tuple[str, ...] = (
    # Version control
    ".git",
    ".hg",
    ".svn",
    # Dependency trees
    "node_modules",
    ".venv",
    "venv",
    ".tox",
    "__pycache__",
    # Build output
    ".wrangler",
    "dist",
    "build",
    ".next",
    "coverage",
    ".nuxt",
    ".turbo",
)

# Cap for text reads (hygiene detectors only look at source-sized files)
DEFAULT_MAX_TEXT_BYTES = 1024 * 1024


def relpath(root: Path, path: Path) -> str:
    """Path relative to root, POSIX separators."""
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return Path(os.path.relpath(path, root)).as_posix()


class FileWalker:
    """Bounded-depth walker over one project root."""

    def __init__(
        self,
        root: Path,
        exclude_dirs: Optional[Iterable[str]] = None,
        skips: Optional[SkipLog] = None
    ):
        """
        Args:
            root: Directory to walk
            exclude_dirs: Directory basenames never entered
                          (default: DEFAULT_EXCLUDE_DIRS)
            skips: Accumulator for unreadable entries
        """
        self.root = Path(root)
        self.exclude_dirs: Set[str] = set(
            DEFAULT_EXCLUDE_DIRS if exclude_dirs is None else exclude_dirs
        )
        self.skips = skips if skips is not None else SkipLog()

    # =========================================================================
    # Traversal
    # =========================================================================

    def walk(
        self,
        max_depth: int,
        exclude_dirs: Optional[Iterable[str]] = None
    ) -> Iterator[Tuple[Path, List[Path], List[Path], int]]:
        """
        Yield (directory, subdirectories, files, depth) top-down.

        Subdirectories listed are the ones that will be descended into
        (excluded names and symlinks are left out). Files are regular
        files only.
        """
        excluded = self.exclude_dirs if exclude_dirs is None else set(exclude_dirs)
        yield from self._walk(self.root, 0, max_depth, excluded)

    def _walk(self, directory: Path, depth: int, max_depth: int, excluded: Set[str]):
        if depth > max_depth:
            return

        entries = self._scandir(directory)
        if entries is None:
            return

        subdirs: List[Path] = []
        files: List[Path] = []
        for entry in entries:
            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir():
                    if entry.name not in excluded:
                        subdirs.append(Path(entry.path))
                elif entry.is_file():
                    files.append(Path(entry.path))
            except OSError as e:
                self._skip(entry.path, e)

        yield directory, subdirs, files, depth

        for sub in subdirs:
            yield from self._walk(sub, depth + 1, max_depth, excluded)

    def _scandir(self, directory: Path) -> Optional[List[os.DirEntry]]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._skip(directory, e)
            return None

    def _skip(self, path, error: OSError) -> None:
        self.skips.record_error(path, error)
        logger.debug("Skipping %s: %s", path, error)

    # =========================================================================
    # Queries
    # =========================================================================

    def files(
        self,
        max_depth: int,
        extensions: Sequence[str] = (),
        names: Sequence[str] = (),
        exclude_dirs: Optional[Iterable[str]] = None
    ) -> List[Path]:
        """
        Files whose basename ends with one of `extensions` or equals one of `names`.

        Suffix matching is a plain endswith, so "~" matches "notes.txt~".
        """
        name_set = set(names)
        matched: List[Path] = []
        for _, _, files, _ in self.walk(max_depth, exclude_dirs):
            for f in files:
                if f.name in name_set or any(f.name.endswith(ext) for ext in extensions):
                    matched.append(f)
        return sorted(matched)

    def all_files(self, max_depth: int, exclude_dirs: Optional[Iterable[str]] = None) -> List[Path]:
        matched: List[Path] = []
        for _, _, files, _ in self.walk(max_depth, exclude_dirs):
            matched.extend(files)
        return sorted(matched)

    def directories(
        self,
        max_depth: int,
        skip_hidden: bool = False,
        exclude_dirs: Optional[Iterable[str]] = None
    ) -> List[Path]:
        """
        Every directory below the root (root itself excluded).

        With skip_hidden, dot-directories and everything under them are left out.
        """
        found: List[Path] = []
        for directory, _, _, depth in self.walk(max_depth, exclude_dirs):
            if depth == 0:
                continue
            if skip_hidden and any(part.startswith(".") for part in directory.relative_to(self.root).parts):
                continue
            found.append(directory)
        return found


# =============================================================================
# Sizing and Reading
# =============================================================================

def file_size(path: Path, skips: Optional[SkipLog] = None) -> int:
    """Size of one file in bytes, 0 if it cannot be stat'ed."""
    try:
        return os.stat(path, follow_symlinks=False).st_size
    except OSError as e:
        if skips is not None:
            skips.record_error(path, e)
        logger.debug("Cannot stat %s: %s", path, e)
        return 0


def sum_sizes(paths: Iterable[Path], skips: Optional[SkipLog] = None) -> int:
    return sum(file_size(p, skips) for p in paths)


def directory_size(path: Path, skips: Optional[SkipLog] = None) -> int:
    """
    Recursive byte total of a directory (actual sizes, not file count).

    Symlinks count as their own size and are not followed.
    """
    total = 0
    stack = [Path(path)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            if skips is not None:
                skips.record_error(current, e)
            logger.debug("Cannot list %s: %s", current, e)
            continue

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    stack.append(Path(entry.path))
                else:
                    total += entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                if skips is not None:
                    skips.record_error(entry.path, e)
                logger.debug("Cannot stat %s: %s", entry.path, e)
    return total


def path_size(path: Path, skips: Optional[SkipLog] = None) -> int:
    """Size of a file, or recursive size of a directory."""
    if Path(path).is_dir() and not Path(path).is_symlink():
        return directory_size(path, skips)
    return file_size(path, skips)


def read_text(
    path: Path,
    skips: Optional[SkipLog] = None,
    max_bytes: int = DEFAULT_MAX_TEXT_BYTES
) -> Optional[str]:
    """
    Read a UTF-8 text file.

    Returns None (and records a skip) for files that are too large,
    not valid UTF-8, or unreadable.
    """
    size = file_size(path, skips)
    if size > max_bytes:
        if skips is not None:
            skips.add(path, SkipReason.TOO_LARGE, f"{size} bytes")
        return None
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        if skips is not None:
            skips.add(path, SkipReason.UNDECODABLE, str(e.reason))
        return None
    except OSError as e:
        if skips is not None:
            skips.record_error(path, e)
        logger.debug("Cannot read %s: %s", path, e)
        return None


def read_bytes(path: Path, limit: int, skips: Optional[SkipLog] = None) -> Optional[bytes]:
    """Read at most `limit` bytes from the start of a file."""
    try:
        with open(path, "rb") as f:
            return f.read(limit)
    except OSError as e:
        if skips is not None:
            skips.record_error(path, e)
        logger.debug("Cannot read %s: %s", path, e)
        return None
