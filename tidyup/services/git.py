"""
Git Integration — Read-only version-control plumbing for detectors

Three questions are asked of git:
- Is this path tracked?               (secrets exposure)
- Which files are ignored+untracked?  (reclaimable ignored files)
- When was each local branch last committed to?  (stale branches)

Every query degrades to "no results" outside a repository, when git is
not installed, or when the command fails. No retries: these are blocking
calls made while a user is waiting.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class BranchInfo:
    """A local branch and its last commit date."""
    name: str
    committed_at: datetime

    def age_days(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        return (now - self.committed_at).days


class GitIntegration:
    """Git repository queries for one project root."""

    def __init__(self, repo_path: Optional[Path] = None, git_executable: str = "git"):
        """
        Args:
            repo_path: Path to repository root. If None, uses current directory.
            git_executable: Name or path of the git binary
        """
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.git_dir = self.repo_path / ".git"
        self.git_executable = git_executable

    @property
    def is_available(self) -> bool:
        return shutil.which(self.git_executable) is not None

    @property
    def is_git_repo(self) -> bool:
        """A .git directory (or worktree .git file) exists at the root."""
        return self.git_dir.exists() and self.is_available

    def _run_git(self, args: List[str], check: bool = True) -> Optional[str]:
        """Run a git command and return stdout, or None on any failure."""
        try:
            result = subprocess.run(
                [self.git_executable] + args,
                cwd=self.repo_path,
                capture_output=True,
                # Paths in -z output are raw bytes; undecodable names round-trip as surrogates
                encoding="utf-8",
                errors="surrogateescape",
                check=check
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            logger.debug("git %s failed (%s): %s", " ".join(args), e.returncode, e.stderr)
            return None
        except OSError as e:
            logger.debug("git %s could not run: %s", " ".join(args), e)
            return None

    # =========================================================================
    # Tracked files
    # =========================================================================

    def is_tracked(self, relative_path: str) -> bool:
        """True if git tracks this path (ls-files --error-unmatch)."""
        if not self.is_git_repo:
            return False
        output = self._run_git(["ls-files", "--error-unmatch", "--", relative_path])
        return output is not None

    def tracked_files(self) -> Set[str]:
        """All tracked paths, relative POSIX strings."""
        if not self.is_git_repo:
            return set()
        output = self._run_git(["ls-files", "-z"])
        if not output:
            return set()
        return {p for p in output.split("\0") if p}

    # =========================================================================
    # Ignored files
    # =========================================================================

    def ignored_untracked_files(self) -> List[str]:
        """Ignored and untracked files, relative POSIX strings, sorted."""
        if not self.is_git_repo:
            return []
        output = self._run_git([
            "ls-files", "--others", "--ignored", "--exclude-standard", "-z"
        ])
        if not output:
            return []
        return sorted(p for p in output.split("\0") if p)

    # =========================================================================
    # Branches
    # =========================================================================

    def branches(self) -> List[BranchInfo]:
        """Local branches with their last commit date, oldest first."""
        if not self.is_git_repo:
            return []
        output = self._run_git([
            "for-each-ref",
            "--sort=committerdate",
            "--format=%(refname:short)|%(committerdate:iso-strict)",
            "refs/heads/"
        ])
        if not output:
            return []

        branches = []
        for line in output.strip().split("\n"):
            name, sep, date_str = line.partition("|")
            if not sep or not name:
                continue
            try:
                date_str = date_str.strip()
                if date_str.endswith("Z"):
                    date_str = date_str[:-1] + "+00:00"
                committed_at = datetime.fromisoformat(date_str)
            except ValueError:
                logger.debug("Unparseable branch date for %s: %r", name, date_str)
                continue
            if committed_at.tzinfo is None:
                committed_at = committed_at.replace(tzinfo=timezone.utc)
            branches.append(BranchInfo(name=name, committed_at=committed_at))
        return branches

    def stale_branches(
        self,
        days: int = 90,
        exclude: Iterable[str] = ("main", "master"),
        now: Optional[datetime] = None
    ) -> List[str]:
        """Branch names with no commit in the last `days` days."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=days)
        excluded = set(exclude)
        return [
            b.name for b in self.branches()
            if b.committed_at < cutoff and b.name not in excluded
        ]
