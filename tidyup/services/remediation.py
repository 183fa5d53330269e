"""
Remediation — Executable fixes attached to autofixable findings

Each remediation is confined to the paths it was built with, all of
which must resolve inside the project root. Nothing here runs during a
scan: remediations execute only after the user has selected and
confirmed them (or pre-approved them in a previous run).

Failures raise RemediationError so the remediator can report them per
finding and keep going with the rest of the selection.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


class RemediationError(Exception):
    """A remediation could not be completed."""

    def __init__(self, message: str, exit_code: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output


@dataclass
class RemediationResult:
    """What a remediation did."""
    removed: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    output: str = ""


def _confine(root: Path, relative: str) -> Path:
    """Resolve a relative path and refuse anything outside root."""
    rel = Path(relative)
    if rel.is_absolute() or ".." in rel.parts or not rel.parts:
        raise RemediationError(f"Refusing to touch path outside project: {relative}")
    root = Path(root).resolve()
    target = root / rel
    resolved_parent = target.parent.resolve()
    if resolved_parent != root and root not in resolved_parent.parents:
        raise RemediationError(f"Refusing to touch path outside project: {relative}")
    return target


class Remediation:
    """Base class for remediation actions."""

    def __init__(self, root: Path, paths: Sequence[str]):
        self.root = Path(root)
        self.paths = list(paths)

    @property
    def summary(self) -> str:
        raise NotImplementedError

    def run(self) -> RemediationResult:
        raise NotImplementedError

    def __call__(self) -> RemediationResult:
        return self.run()


class DeleteFiles(Remediation):
    """Delete individual files. Already-gone files are not an error."""

    @property
    def summary(self) -> str:
        return f"delete {len(self.paths)} file(s)"

    def run(self) -> RemediationResult:
        result = RemediationResult()
        errors = []
        for rel in self.paths:
            target = _confine(self.root, rel)
            try:
                target.unlink()
                result.removed.append(rel)
            except FileNotFoundError:
                result.missing.append(rel)
            except OSError as e:
                errors.append(f"{rel}: {e.strerror or e}")
        if errors:
            raise RemediationError(
                f"Could not delete {len(errors)} of {len(self.paths)} file(s): " + "; ".join(errors[:3])
            )
        return result


class RemoveTree(Remediation):
    """Remove whole directories (build output, caches)."""

    @property
    def summary(self) -> str:
        return f"remove {', '.join(p + '/' for p in self.paths)}"

    def run(self) -> RemediationResult:
        result = RemediationResult()
        for rel in self.paths:
            target = _confine(self.root, rel)
            if not target.exists():
                result.missing.append(rel)
                continue
            if target.is_symlink() or not target.is_dir():
                raise RemediationError(f"Not a directory: {rel}")
            try:
                shutil.rmtree(target)
            except OSError as e:
                raise RemediationError(f"Could not remove {rel}/: {e.strerror or e}") from e
            result.removed.append(rel)
        return result


class RemoveEmptyDirs(Remediation):
    """rmdir each directory, deepest first. Refuses non-empty directories."""

    @property
    def summary(self) -> str:
        return f"remove {len(self.paths)} empty director{'y' if len(self.paths) == 1 else 'ies'}"

    def run(self) -> RemediationResult:
        result = RemediationResult()
        ordered = sorted(self.paths, key=lambda p: p.count("/"), reverse=True)
        for rel in ordered:
            target = _confine(self.root, rel)
            try:
                os.rmdir(target)
                result.removed.append(rel)
            except FileNotFoundError:
                result.missing.append(rel)
            except OSError as e:
                # Something appeared in it since the scan: leave it alone
                logger.warning("Keeping %s: %s", rel, e.strerror or e)
        return result


class ReinstallDependencies(Remediation):
    """
    Delete a dependency tree, then reinstall it with the package manager.

    The only remediation that spawns a process as part of fixing. The
    manager's exit code and output are always surfaced: a failed
    reinstall raises RemediationError, it is never reported as success.
    """

    def __init__(self, root: Path, directory: str, manager: str = "npm",
                 install_args: Sequence[str] = ("install",)):
        super().__init__(root, [directory])
        self.directory = directory
        self.manager = manager
        self.install_args = list(install_args)

    @property
    def command(self) -> List[str]:
        return [self.manager] + self.install_args

    @property
    def summary(self) -> str:
        return f"remove {self.directory}/ and run '{' '.join(self.command)}'"

    def run(self) -> RemediationResult:
        result = RemoveTree(self.root, [self.directory]).run()

        executable = shutil.which(self.manager)
        if executable is None:
            raise RemediationError(
                f"{self.directory}/ was removed but '{self.manager}' is not installed; "
                f"run '{' '.join(self.command)}' manually"
            )

        try:
            proc = subprocess.run(
                [executable] + self.install_args,
                cwd=self.root,
                capture_output=True,
                encoding="utf-8",
                errors="replace"
            )
        except OSError as e:
            raise RemediationError(f"Could not run {self.manager}: {e}") from e

        output = (proc.stdout or "") + (proc.stderr or "")
        if proc.returncode != 0:
            raise RemediationError(
                f"'{' '.join(self.command)}' exited with code {proc.returncode}",
                exit_code=proc.returncode,
                output=output
            )
        result.output = output
        return result
