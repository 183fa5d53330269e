"""
Workspace Detectors — Monorepo structure checks

Sub-projects live one level under the workspace directories
(packages/, apps/, services/, libs/). These checks look at how those
sub-projects relate to each other and to the root.
"""

import json
import os
from pathlib import Path
from typing import Dict, List

from ..core.finding import Finding, Severity, SkipLog, SkipReason
from ..core.walker import file_size, read_bytes, relpath
from .base import Detector, ScanOptions

WORKSPACE_DIRS = ("packages", "apps", "services", "libs")

# Configs that sub-projects should symlink from the root, not copy
SHARED_CONFIGS = ("tsconfig.json", ".eslintrc.js", ".eslintrc.json", ".prettierrc", ".editorconfig")

# Generic directory names that legitimately recur everywhere
COMMON_DIR_NAMES = frozenset({
    "src", "lib", "test", "tests", "utils", "types", "components",
})

MIN_DESCRIPTION_LENGTH = 10


def workspace_projects(root: Path, skips: SkipLog) -> List[Path]:
    """Direct children of the workspace directories, sorted."""
    projects = []
    for name in WORKSPACE_DIRS:
        parent = root / name
        if parent.is_symlink() or not parent.is_dir():
            continue
        try:
            with os.scandir(parent) as it:
                children = sorted(
                    Path(e.path) for e in it
                    if e.is_dir(follow_symlinks=False) and not e.name.startswith(".")
                )
        except OSError as e:
            skips.record_error(parent, e)
            continue
        projects.extend(children)
    return projects


class CopiedConfigsDetector(Detector):
    """
    Shared configs copied into sub-projects instead of symlinked.

    Only byte-identical copies are flagged: a copy that differs from the
    root is assumed to have diverged on purpose.
    """

    id = "copied-not-symlinked"
    category = "Copied Config Files"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        copies: Dict[str, str] = {}
        projects = workspace_projects(root, skips)

        for name in SHARED_CONFIGS:
            canonical = root / name
            if not canonical.is_file():
                continue
            limit = file_size(canonical, skips) + 1
            canonical_bytes = read_bytes(canonical, limit, skips)
            if canonical_bytes is None:
                continue

            for project in projects:
                copy = project / name
                if copy.is_symlink() or not copy.is_file():
                    continue
                if read_bytes(copy, limit, skips) == canonical_bytes:
                    copies[relpath(root, copy)] = Path(os.path.relpath(canonical, project)).as_posix()

        if not copies:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"{len(copies)} config file(s) identical to the root copy",
            affected_paths=sorted(copies),
            details={"link_targets": dict(sorted(copies.items()))},
        )]


class UnclearProjectsDetector(Detector):
    """Sub-projects with no README and no meaningful package description."""

    id = "unclear-projects"
    category = "Unclear Projects"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        unclear = [
            relpath(root, project)
            for project in workspace_projects(root, skips)
            if not self._has_readme(project) and not self._has_description(project, skips)
        ]
        if not unclear:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"{len(unclear)} sub-project(s) without a README or description",
            affected_paths=unclear,
        )]

    def _has_readme(self, project: Path) -> bool:
        try:
            return any(p.is_file() and p.name.upper().startswith("README") for p in project.iterdir())
        except OSError:
            return False

    def _has_description(self, project: Path, skips: SkipLog) -> bool:
        package_json = project / "package.json"
        if not package_json.is_file():
            return False
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            skips.add(package_json, SkipReason.UNDECODABLE, str(e))
            return False
        description = data.get("description") if isinstance(data, dict) else None
        return isinstance(description, str) and len(description.strip()) > MIN_DESCRIPTION_LENGTH


class DuplicateDirsDetector(Detector):
    """Directory names that recur in several places."""

    id = "duplicate-dirs"
    category = "Duplicate Directories"
    deep_only = True

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        walker = self.walker(root, options, skips)
        locations: Dict[str, List[str]] = {}
        for directory in walker.directories(options.settings.shallow_depth, skip_hidden=True):
            if directory.name in COMMON_DIR_NAMES:
                continue
            locations.setdefault(directory.name, []).append(relpath(root, directory))

        recurring = {name: paths for name, paths in sorted(locations.items()) if len(paths) > 1}
        if not recurring:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"{len(recurring)} directory name(s) used in several places",
            affected_paths=[p for paths in recurring.values() for p in paths],
            details={"locations": recurring},
        )]


DETECTORS = [
    CopiedConfigsDetector,
    UnclearProjectsDetector,
    DuplicateDirsDetector,
]
