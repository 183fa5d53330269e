"""
Version-Control Detectors — What git knows about the project

Tracked secrets, ignored-but-present files, abandoned branches and
large tracked files. All of them degrade to no findings outside a
repository or when git is not installed.
"""

from pathlib import Path
from typing import List

from ..core.finding import Finding, Severity, SkipLog
from ..core.walker import file_size, relpath
from ..services.remediation import DeleteFiles
from .base import Detector, ScanOptions
from .disk import LOCKFILES, MB

ENV_FILES = (".env", ".env.local", ".env.production", ".env.development")


class EnvInGitDetector(Detector):
    """
    Environment files committed to the repository.

    Never autofixable: deleting the working copy would not remove the
    secret from history, and the file is usually still needed locally.
    """

    id = "env-in-git"
    category = "Secrets Exposed"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        git = options.git
        if not git.is_git_repo:
            return []

        candidates = self.walker(root, options, skips).files(options.settings.deep_depth, names=ENV_FILES)
        tracked = sorted(
            rel for rel in (relpath(root, p) for p in candidates)
            if git.is_tracked(rel)
        )
        if not tracked:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.CRITICAL,
            category=self.category,
            description=f"{', '.join(tracked)} tracked by git; rotate the secrets and untrack",
            affected_paths=tracked,
        )]


class GitIgnoredDetector(Detector):
    """Files git ignores that still take up space in the working tree."""

    id = "git-ignored"
    category = "Git Ignored Files"
    deep_only = True

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        excluded = set(options.settings.exclude_dirs)
        paths = [
            p for p in options.git.ignored_untracked_files()
            if not excluded.intersection(p.split("/")[:-1])
        ]
        sizes = {p: file_size(root / p, skips) for p in paths}
        total = sum(sizes.values())
        if total <= options.settings.ignored_threshold_mb * MB:
            return []

        paths = [p for p in paths if sizes[p] > 0 or (root / p).exists()]
        return [Finding(
            id=self.id,
            severity=Severity.SUGGESTION,
            category=self.category,
            description=f"{len(paths)} ignored file(s) ({total // MB}MB)",
            affected_paths=paths,
            reclaimable_bytes=total,
            remediation=DeleteFiles(root, paths),
        )]


class StaleBranchesDetector(Detector):
    id = "stale-branches"
    category = "Stale Git Branches"
    deep_only = True

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        settings = options.settings
        stale = options.git.stale_branches(
            days=settings.stale_branch_days,
            exclude=settings.primary_branches
        )
        if not stale:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.SUGGESTION,
            category=self.category,
            description=f"{len(stale)} branch(es) without commits for {settings.stale_branch_days}+ days",
            affected_paths=[f"branch: {name}" for name in stale],
        )]


class LargeFilesDetector(Detector):
    """Files above the large-file threshold (tracked files only inside a repo)."""

    id = "large-files"
    category = "Large Files"
    deep_only = True

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        settings = options.settings
        excluded = set(settings.exclude_dirs)

        if options.git.is_git_repo:
            candidates = sorted(options.git.tracked_files())
        else:
            walker = self.walker(root, options, skips)
            candidates = [relpath(root, p) for p in walker.all_files(settings.deep_depth)]

        threshold = settings.large_file_mb * MB
        large = {}
        for rel in candidates:
            parts = rel.split("/")
            if excluded.intersection(parts[:-1]):
                continue
            if parts[-1] in LOCKFILES or parts[-1].endswith(".lock"):
                continue
            path = root / rel
            if path.is_symlink() or not path.is_file():
                continue
            size = file_size(path, skips)
            if size > threshold:
                large[rel] = size

        if not large:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.INFO,
            category=self.category,
            description=f"{len(large)} file(s) over {settings.large_file_mb}MB",
            affected_paths=list(large),
            reclaimable_bytes=sum(large.values()),
            details={"sizes": large},
        )]


DETECTORS = [
    EnvInGitDetector,
    GitIgnoredDetector,
    StaleBranchesDetector,
    LargeFilesDetector,
]
