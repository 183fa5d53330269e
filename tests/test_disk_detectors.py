"""
Tests for the disk detectors: ephemeral files, lockfile conflicts,
dependency trees, build output and empty directories.
"""

import pytest

from tidyup.core.finding import Severity
from tidyup.detectors.disk import (
    BackupFilesDetector,
    BuildArtifactsDetector,
    EmptyDirsDetector,
    LargeDependenciesDetector,
    LockfileConflictDetector,
    OSMetadataDetector,
    TempFilesDetector,
    declared_manager,
    is_ephemeral,
)
from tidyup.services.remediation import DeleteFiles, ReinstallDependencies, RemoveEmptyDirs, RemoveTree

from tests.factories import MB


class TestEphemeralFiles:

    def test_temp_files(self, project):
        project.file("debug.log", "x" * 10)
        project.file("src/notes.txt~", "x" * 5)
        project.file("src/app.py", "print('hi')")

        result = project.detect(TempFilesDetector())

        assert len(result.findings) == 1
        finding = result.findings[0]
        assert finding.id == "temp-files"
        assert finding.severity == Severity.INFO
        assert finding.affected_paths == ["debug.log", "src/notes.txt~"]
        assert finding.reclaimable_bytes == 15
        assert isinstance(finding.remediation, DeleteFiles)
        assert finding.learn_key == "temp-files@v1"

    def test_os_metadata(self, project):
        project.file(".DS_Store", "meta")
        project.file("img/Thumbs.db", "meta")

        finding = project.detect(OSMetadataDetector()).findings[0]

        assert finding.category == "OS Metadata"
        assert finding.affected_paths == [".DS_Store", "img/Thumbs.db"]

    def test_backup_files_are_warnings(self, project):
        project.file("config.yaml.bak", "old")
        project.file("main.py.orig", "old")

        finding = project.detect(BackupFilesDetector()).findings[0]

        assert finding.severity == Severity.WARNING
        assert finding.learn_key == "backup-files@v1"
        assert len(finding.affected_paths) == 2

    def test_nothing_found(self, project):
        project.file("README.md", "# hi")
        assert project.detect(TempFilesDetector()).findings == []

    def test_excluded_dirs_ignored(self, project):
        project.file("node_modules/pkg/install.log", "x")
        assert project.detect(TempFilesDetector()).findings == []

    def test_is_ephemeral(self):
        assert is_ephemeral("a.swp")
        assert is_ephemeral("desktop.ini")
        assert is_ephemeral("x.old")
        assert not is_ephemeral("main.py")


class TestDeclaredManager:

    def test_package_manager_field_wins(self, project):
        project.package_json(packageManager="yarn@4.1.0")
        project.file("pnpm-workspace.yaml", "packages: []")
        assert declared_manager(project.root) == "yarn"

    def test_pnpm_workspace(self, project):
        project.package_json()
        project.file("pnpm-workspace.yaml", "packages: []")
        assert declared_manager(project.root) == "pnpm"

    def test_pnpm_lockfile(self, project):
        project.file("pnpm-lock.yaml", "lockfileVersion: 9")
        assert declared_manager(project.root) == "pnpm"

    def test_unknown(self, project):
        project.package_json()
        assert declared_manager(project.root) is None

    def test_malformed_package_json_falls_through(self, project):
        project.file("package.json", "{ not json")
        project.file("pnpm-lock.yaml", "lockfileVersion: 9")
        assert declared_manager(project.root) == "pnpm"


class TestLockfileConflict:

    def test_wrong_lockfiles_flagged(self, project):
        project.package_json(packageManager="pnpm@9.0.0")
        project.file("pnpm-lock.yaml", "lockfileVersion: 9")
        project.file("package-lock.json", "{}" * 10)
        project.file("yarn.lock", "# yarn")

        result = project.detect(LockfileConflictDetector())

        assert len(result.findings) == 1
        finding = result.findings[0]
        assert finding.id == "wrong-lock-files"
        assert finding.affected_paths == ["package-lock.json", "yarn.lock"]
        assert finding.reclaimable_bytes == 20 + len("# yarn")
        assert finding.learn_key is None
        assert finding.details == {"manager": "pnpm", "canonical": "pnpm-lock.yaml"}

    def test_single_lockfile_is_fine(self, project):
        project.file("package-lock.json", "{}")
        assert project.detect(LockfileConflictDetector()).findings == []

    def test_canonical_missing_no_finding(self, project):
        project.package_json(packageManager="bun@1.0.0")
        project.file("package-lock.json", "{}")
        project.file("yarn.lock", "# yarn")
        assert project.detect(LockfileConflictDetector()).findings == []

    def test_no_declared_manager_no_finding(self, project):
        project.package_json()
        project.file("package-lock.json", "{}")
        project.file("yarn.lock", "# yarn")
        assert project.detect(LockfileConflictDetector()).findings == []


class TestLargeDependencies:

    def test_over_threshold(self, project):
        project.package_json(packageManager="pnpm@9.0.0")
        project.file("node_modules/left-pad/index.js", size=2 * MB)

        finding = project.detect(LargeDependenciesDetector(), dependency_threshold_mb=1).findings[0]

        assert finding.affected_paths == ["node_modules"]
        assert finding.reclaimable_bytes == 2 * MB
        assert isinstance(finding.remediation, ReinstallDependencies)
        assert finding.remediation.command == ["pnpm", "install", "--prefer-offline"]

    def test_defaults_to_npm(self, project):
        project.file("node_modules/a/index.js", size=2 * MB)
        finding = project.detect(LargeDependenciesDetector(), dependency_threshold_mb=1).findings[0]
        assert finding.remediation.command == ["npm", "install"]

    def test_under_threshold(self, project):
        project.file("node_modules/a/index.js", size=MB // 2)
        assert project.detect(LargeDependenciesDetector(), dependency_threshold_mb=1).findings == []


class TestBuildArtifacts:

    def test_one_finding_per_directory(self, project):
        project.file("dist/bundle.js", size=2 * MB)
        project.file("coverage/lcov.info", size=3 * MB)
        project.file("build/tiny.js", size=10)

        findings = project.detect(BuildArtifactsDetector(), build_threshold_mb=1).findings

        assert [f.id for f in findings] == ["build-dist", "build-coverage"]
        assert all(f.severity == Severity.SUGGESTION for f in findings)
        assert findings[0].learn_key == "build-dist@v1"
        assert isinstance(findings[0].remediation, RemoveTree)
        assert findings[1].reclaimable_bytes == 3 * MB


class TestEmptyDirs:

    def test_empty_dirs_found(self, project):
        project.dir("a/empty")
        project.dir("b")
        project.file("c/keep.txt", "x")

        finding = project.detect(EmptyDirsDetector()).findings[0]

        assert finding.affected_paths == ["a/empty", "b"]
        assert finding.reclaimable_bytes == 0
        assert isinstance(finding.remediation, RemoveEmptyDirs)

    def test_no_empty_dirs(self, project):
        project.file("c/keep.txt", "x")
        assert project.detect(EmptyDirsDetector()).findings == []


@pytest.mark.parametrize("detector_cls", [
    TempFilesDetector, OSMetadataDetector, BackupFilesDetector,
    LockfileConflictDetector, LargeDependenciesDetector,
    BuildArtifactsDetector, EmptyDirsDetector,
])
def test_empty_project_has_no_findings(project, detector_cls):
    assert project.detect(detector_cls()).findings == []
