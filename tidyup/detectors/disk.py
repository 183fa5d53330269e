"""
Disk Detectors — Reclaimable space in the working tree

Ephemeral files (editor swap, logs, OS metadata, backups), conflicting
package-manager lockfiles, oversized dependency trees, build output and
empty directories. Everything here is autofixable; the fix is always
confined to the paths listed on the finding.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from ..core.finding import Finding, Severity, SkipLog, SkipReason, learn_key
from ..core.walker import directory_size, relpath, sum_sizes
from ..services.remediation import DeleteFiles, ReinstallDependencies, RemoveEmptyDirs, RemoveTree
from .base import Detector, ScanOptions

logger = logging.getLogger(__name__)

MB = 1024 * 1024

TEMP_EXTENSIONS = (".log", ".tmp", ".temp", ".swp", ".swo", "~")
METADATA_NAMES = (".DS_Store", "Thumbs.db", "desktop.ini")
BACKUP_EXTENSIONS = (".bak", ".backup", ".old", ".orig")

# Lockfile name -> package manager that writes it
LOCKFILES = {
    "package-lock.json": "npm",
    "yarn.lock": "yarn",
    "pnpm-lock.yaml": "pnpm",
    "bun.lockb": "bun",
}

BUILD_DIRS = ("dist", "build", ".next", ".nuxt", "coverage", ".turbo")

# Extra install flags per manager when reinstalling dependencies
INSTALL_ARGS = {
    "pnpm": ("install", "--prefer-offline"),
    "yarn": ("install",),
    "npm": ("install",),
    "bun": ("install",),
}


def is_ephemeral(name: str) -> bool:
    """Temp, metadata or backup file: owned by the ephemeral detectors."""
    return (
        name in METADATA_NAMES
        or any(name.endswith(ext) for ext in TEMP_EXTENSIONS + BACKUP_EXTENSIONS)
    )


def declared_manager(root: Path, skips: Optional[SkipLog] = None) -> Optional[str]:
    """
    The package manager a project declares.

    Resolution order:
      1. package.json "packageManager" field ("pnpm@9.1.0" -> "pnpm")
      2. pnpm-workspace.yaml present -> pnpm
      3. pnpm-lock.yaml present -> pnpm
    """
    package_json = root / "package.json"
    if package_json.exists():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            if skips is not None:
                skips.add(package_json, SkipReason.UNDECODABLE, str(e))
            data = {}
        field_value = data.get("packageManager") if isinstance(data, dict) else None
        if isinstance(field_value, str) and field_value:
            name = field_value.split("@", 1)[0].strip()
            if name:
                return name

    if (root / "pnpm-workspace.yaml").exists():
        return "pnpm"
    if (root / "pnpm-lock.yaml").exists():
        return "pnpm"
    return None


# =============================================================================
# Ephemeral files
# =============================================================================

class _FileSweep(Detector):
    """Collect files by suffix or name, offer to delete them."""

    severity = Severity.INFO
    extensions: tuple = ()
    names: tuple = ()
    noun = "file(s)"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        walker = self.walker(root, options, skips)
        matched = walker.files(
            options.settings.deep_depth,
            extensions=self.extensions,
            names=self.names
        )
        if not matched:
            return []

        paths = [relpath(root, p) for p in matched]
        size = sum_sizes(matched, skips)
        return [Finding(
            id=self.id,
            severity=self.severity,
            category=self.category,
            description=f"{len(paths)} {self.noun}",
            affected_paths=paths,
            reclaimable_bytes=size,
            remediation=DeleteFiles(root, paths),
            learn_key=learn_key(self.id),
        )]


class TempFilesDetector(_FileSweep):
    id = "temp-files"
    category = "Temporary Files"
    extensions = TEMP_EXTENSIONS
    noun = "temporary file(s)"


class OSMetadataDetector(_FileSweep):
    id = "os-metadata"
    category = "OS Metadata"
    names = METADATA_NAMES
    noun = "OS metadata file(s)"


class BackupFilesDetector(_FileSweep):
    id = "backup-files"
    category = "Backup Files"
    severity = Severity.WARNING
    extensions = BACKUP_EXTENSIONS
    noun = "backup file(s)"


# =============================================================================
# Package managers
# =============================================================================

class LockfileConflictDetector(Detector):
    """Lockfiles from more than one package manager at the root."""

    id = "wrong-lock-files"
    category = "Package Manager Conflict"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        present = [name for name in LOCKFILES if (root / name).is_file()]
        if len(present) < 2:
            return []

        manager = declared_manager(root, skips)
        canonical = [name for name in present if LOCKFILES[name] == manager]
        if not canonical:
            # Cannot tell which one is right; say nothing rather than guess
            logger.debug("Lockfiles %s but no declared manager", present)
            return []

        wrong = [name for name in present if LOCKFILES[name] != manager]
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"{manager} project has {', '.join(wrong)}",
            affected_paths=wrong,
            reclaimable_bytes=sum_sizes([root / name for name in wrong], skips),
            remediation=DeleteFiles(root, wrong),
            details={"manager": manager, "canonical": canonical[0]},
        )]


class LargeDependenciesDetector(Detector):
    """Root node_modules above the dependency threshold."""

    id = "large-node-modules"
    category = "Large Dependencies"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        node_modules = root / "node_modules"
        if node_modules.is_symlink() or not node_modules.is_dir():
            return []

        size = directory_size(node_modules, skips)
        if size <= options.settings.dependency_threshold_mb * MB:
            return []

        manager = declared_manager(root, skips) or "npm"
        install_args = INSTALL_ARGS.get(manager, ("install",))
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"node_modules is {size // MB}MB",
            affected_paths=["node_modules"],
            reclaimable_bytes=size,
            remediation=ReinstallDependencies(root, "node_modules", manager, install_args),
            details={"manager": manager},
        )]


# =============================================================================
# Build output and empty directories
# =============================================================================

class BuildArtifactsDetector(Detector):
    """Build output directories above the build threshold, one finding each."""

    id = "build-artifacts"
    category = "Build Artifacts"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        threshold = options.settings.build_threshold_mb * MB
        findings = []
        for name in BUILD_DIRS:
            directory = root / name
            if directory.is_symlink() or not directory.is_dir():
                continue
            size = directory_size(directory, skips)
            if size <= threshold:
                continue
            finding_id = f"build-{name}"
            findings.append(Finding(
                id=finding_id,
                severity=Severity.SUGGESTION,
                category=self.category,
                description=f"{name}/ ({size // MB}MB)",
                affected_paths=[name],
                reclaimable_bytes=size,
                remediation=RemoveTree(root, [name]),
                learn_key=learn_key(finding_id),
            ))
        return findings


class EmptyDirsDetector(Detector):
    id = "empty-dirs"
    category = "Empty Directories"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        walker = self.walker(root, options, skips)
        empty = []
        for directory in walker.directories(options.settings.deep_depth):
            try:
                with os.scandir(directory) as it:
                    if next(it, None) is None:
                        empty.append(relpath(root, directory))
            except OSError as e:
                skips.record_error(directory, e)

        if not empty:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.SUGGESTION,
            category=self.category,
            description=f"{len(empty)} empty director{'y' if len(empty) == 1 else 'ies'}",
            affected_paths=empty,
            remediation=RemoveEmptyDirs(root, empty),
            learn_key=learn_key(self.id),
        )]


DETECTORS = [
    TempFilesDetector,
    OSMetadataDetector,
    BackupFilesDetector,
    LockfileConflictDetector,
    LargeDependenciesDetector,
    BuildArtifactsDetector,
    EmptyDirsDetector,
]
