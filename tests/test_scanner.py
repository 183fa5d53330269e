"""
Tests for Scanner — end-to-end properties of a full scan

Each scenario builds a small tree, runs the full detector registry and
checks the Report as a whole.
"""

import pytest

from tidyup.core.finding import Finding, Severity
from tidyup.core.walker import path_size
from tidyup.detectors import DETECTOR_MODULES, Detector, load_detectors
from tidyup.preferences import PreferenceStore
from tidyup.presentation.symbols import ASCII
from tidyup.services.remediator import Remediator
from tidyup.services.scanner import Scanner
from tidyup.config import ScanSettings

from tests.factories import MB, ScriptedPrompter


def build_messy_project(project):
    """A tree that trips most non-git detectors."""
    project.file(".DS_Store", b"\0" * 4096)
    project.file("debug.log", "line\n" * 50)
    project.file("config.yaml.bak", "old: true\n")
    project.package_json(packageManager="pnpm@9.0.0")
    project.file("pnpm-lock.yaml", "lockfileVersion: 9\n")
    project.file("package-lock.json", "{}\n")
    project.file("node_modules/pkg/index.js", size=2 * MB)
    project.file("dist/bundle.js", size=2 * MB)
    project.dir("empty/nested")
    project.file("src/auth.ts", "const whitelist = [];\nconsole.log(whitelist); // TODO remove\n")
    project.file("docs/orphan.md", "nobody links here\n")
    project.file("assets/a.svg", "<svg>" + "p" * 2000 + "</svg>")
    project.file("assets/copy.svg", "<svg>" + "p" * 2000 + "</svg>")
    return dict(dependency_threshold_mb=1, build_threshold_mb=1, large_file_mb=0)


class TestRegistry:

    def test_every_module_contributes(self):
        detectors = load_detectors()
        ids = [d.id for d in detectors]
        assert len(ids) == len(set(ids))
        assert {"temp-files", "env-in-git", "outdated-terms", "duplicate-content",
                "copied-not-symlinked"} <= set(ids)
        assert DETECTOR_MODULES == ["disk", "vcs", "hygiene", "duplicates", "workspace"]

    def test_deep_only_filtered(self, project):
        scanner = project.scanner()
        shallow = {d.id for d in scanner.active_detectors(deep=False)}
        deep = {d.id for d in scanner.active_detectors(deep=True)}
        assert "stale-branches" not in shallow
        assert {"git-ignored", "stale-branches", "large-files", "duplicate-dirs"} <= deep

    def test_missing_root(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            Scanner(ScanSettings()).scan(tmp_path / "nope")


class TestScenarios:

    def test_zero_state(self, project):
        report = project.scanner().scan(project.root, deep=True)
        assert report.findings == ()
        assert report.total_reclaimable_bytes == 0

    def test_scenario_a_metadata_files(self, project):
        for rel in (".DS_Store", "photos/.DS_Store", "docs/.DS_Store"):
            project.file(rel, b"\0" * 4096)

        report = project.scanner().scan(project.root)

        assert len(report.findings) == 1
        finding = report.findings[0]
        assert finding.category == "OS Metadata"
        assert finding.reclaimable_bytes == 12288
        assert finding.autofixable

    def test_scenario_b_lockfile_conflict(self, project):
        project.file("package-lock.json", '{"lockfileVersion": 3}\n')
        project.file("pnpm-lock.yaml", "lockfileVersion: '9.0'\n")
        project.file("pnpm-workspace.yaml", "packages:\n  - 'packages/*'\n")

        report = project.scanner().scan(project.root)

        assert len(report.findings) == 1
        finding = report.findings[0]
        assert finding.category == "Package Manager Conflict"
        assert finding.affected_paths == ["package-lock.json"]

    @pytest.mark.parametrize("live", [False, True])
    def test_scenario_c_tracked_env(self, git_project, live):
        git_project.file(".env", "API_KEY=secret\n")
        git_project.commit("oops", paths=[".env"])

        report = git_project.scanner().scan(git_project.root)

        assert len(report.findings) == 1
        finding = report.findings[0]
        assert finding.severity == Severity.CRITICAL
        assert not finding.autofixable

        if live:
            outcome = Remediator(ScriptedPrompter(), symbols=ASCII).run(list(report.findings))
            assert outcome.cancelled
        assert git_project.exists(".env")

    def test_scenario_d_duplicate_content(self, project):
        body = "0123456789abcdef" * 128
        project.file("src/data.json", body)
        project.file("backup/data-copy.json", body)

        report = project.scanner().scan(project.root)

        assert len(report.findings) == 1
        group = report.findings[0].details["groups"][0]
        assert group["count"] == 2
        assert set(group["files"]) == {"src/data.json", "backup/data-copy.json"}


class TestProperties:

    def test_idempotent(self, project):
        overrides = build_messy_project(project)
        scanner = project.scanner(**overrides)

        first = scanner.scan(project.root, deep=True)
        second = scanner.scan(project.root, deep=True)

        assert first.to_dict(include_timing=False) == second.to_dict(include_timing=False)
        assert first.total_reclaimable_bytes == second.total_reclaimable_bytes

    def test_conservation(self, project):
        overrides = build_messy_project(project)
        report = project.scanner(**overrides).scan(project.root, deep=True)

        assert report.total_reclaimable_bytes > 0
        for finding in report.findings:
            on_disk = sum(
                path_size(project.root / p)
                for p in finding.affected_paths
                if (project.root / p).exists()
            )
            if finding.reclaimable_bytes == 0:
                continue
            assert finding.reclaimable_bytes == on_disk, finding.id

    def test_scan_never_mutates(self, project):
        overrides = build_messy_project(project)
        before = sorted(p.relative_to(project.root).as_posix() for p in project.root.rglob("*"))
        project.scanner(**overrides).scan(project.root, deep=True)
        after = sorted(p.relative_to(project.root).as_posix() for p in project.root.rglob("*"))
        assert before == after

    def test_safety(self, project):
        overrides = build_messy_project(project)
        report = project.scanner(**overrides).scan(project.root, deep=True)

        for finding in report.findings:
            if not finding.autofixable:
                assert finding.remediation is None
            if finding.category == "Secrets Exposed":
                assert not finding.autofixable

    def test_parallel_keeps_registry_order(self, project):
        overrides = build_messy_project(project)
        sequential = project.scanner(**overrides).scan(project.root, deep=True)
        parallel = project.scanner(parallel=True, workers=3, **overrides).scan(project.root, deep=True)

        assert [f.id for f in sequential.findings] == [f.id for f in parallel.findings]
        assert sequential.to_dict(include_timing=False) == parallel.to_dict(include_timing=False)


class TestLearning:

    def test_remembered_choice_pre_approves_next_scan(self, project, tmp_path):
        store = PreferenceStore(tmp_path / "prefs.yaml")
        project.file("a.bak", "old")
        scanner = project.scanner()

        report = scanner.scan(project.root, approved=store.load())
        backup = report.get("backup-files")
        assert not backup.pre_approved

        Remediator(ScriptedPrompter(select=[0]), preferences=store, symbols=ASCII).run([backup])
        size_after_remember = len(store.load())

        project.file("b.bak", "old again")
        next_report = scanner.scan(project.root, approved=store.load())

        assert next_report.get("backup-files").pre_approved
        assert len(store.load()) == size_after_remember

    def test_findings_without_learn_key_never_pre_approved(self, project):
        project.package_json(packageManager="pnpm@9.0.0")
        project.file("pnpm-lock.yaml", "x")
        project.file("yarn.lock", "y")

        report = project.scanner().scan(project.root, approved={"wrong-lock-files@v1"})

        assert not report.get("wrong-lock-files").pre_approved


class BrokenDetector(Detector):
    id = "broken"
    category = "Broken"

    def detect(self, root, options, skips):
        skips.record_error(root / "locked", PermissionError(13, "Permission denied"))
        return [Finding(id="broken", severity=Severity.INFO, category=self.category, description="still here")]


def test_skips_collected_per_detector(project):
    report = Scanner(ScanSettings(), detectors=[BrokenDetector()]).scan(project.root)

    assert [f.id for f in report.findings] == ["broken"]
    assert [s.reason.value for s in report.skipped["broken"]] == ["permission_denied"]
    assert report.to_dict()["skipped"]["broken"][0]["detail"] == "Permission denied"


class CrashingDetector(Detector):
    id = "crashing"
    category = "Crashing"

    def detect(self, root, options, skips):
        raise UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")


@pytest.mark.parametrize("parallel", [False, True])
def test_crashing_detector_becomes_skip(project, parallel):
    project.file("a.bak", "old")
    detectors = [CrashingDetector()] + load_detectors()
    settings = ScanSettings(parallel=parallel, workers=2)

    report = Scanner(settings, detectors=detectors).scan(project.root)

    assert report.get("backup-files") is not None
    skip = report.skipped["crashing"][0]
    assert skip.reason.value == "detector_failed"
    assert skip.detail.startswith("UnicodeDecodeError")
