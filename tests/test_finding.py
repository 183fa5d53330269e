"""
Tests for Finding, SkipLog and Report

Findings validate themselves at construction; a Report is a frozen
snapshot that serialises without its callables.
"""

import pytest

from tidyup.core.finding import (
    Finding, Report, Severity, SkipLog, SkipReason, learn_key
)
from tidyup.services.remediation import DeleteFiles


def make_finding(**overrides):
    fields = dict(
        id="temp-files",
        severity=Severity.INFO,
        category="Temporary Files",
        description="2 temporary file(s)",
    )
    fields.update(overrides)
    return Finding(**fields)


class TestFindingInvariants:

    def test_unknown_severity_rejected(self):
        with pytest.raises(ValueError, match="Unknown severity"):
            make_finding(severity="urgent")

    def test_reclaimable_bytes_need_paths(self):
        with pytest.raises(ValueError, match="no affected paths"):
            make_finding(reclaimable_bytes=100)

    def test_negative_bytes_rejected(self):
        with pytest.raises(ValueError):
            make_finding(reclaimable_bytes=-1, affected_paths=["a.tmp"])

    def test_zero_bytes_without_paths_allowed(self):
        finding = make_finding()
        assert finding.reclaimable_bytes == 0
        assert finding.affected_paths == []

    def test_autofixable_follows_remediation(self, tmp_path):
        assert not make_finding().autofixable
        fixable = make_finding(
            affected_paths=["a.tmp"],
            remediation=DeleteFiles(tmp_path, ["a.tmp"]),
        )
        assert fixable.autofixable


class TestLearnKey:

    def test_default_version(self):
        assert learn_key("backup-files") == "backup-files@v1"

    def test_bumped_version_does_not_match_old(self):
        assert learn_key("build-dist", 2) == "build-dist@v2"
        assert learn_key("build-dist", 2) != learn_key("build-dist")


class TestSerialization:

    def test_to_dict_replaces_remediation_with_summary(self, tmp_path):
        finding = make_finding(
            affected_paths=["a.tmp", "b.log"],
            reclaimable_bytes=30,
            remediation=DeleteFiles(tmp_path, ["a.tmp", "b.log"]),
            learn_key="temp-files@v1",
        )
        data = finding.to_dict()
        assert data["autofixable"] is True
        assert data["remediation"] == "delete 2 file(s)"
        assert data["learn_key"] == "temp-files@v1"
        assert data["pre_approved"] is False

    def test_to_dict_omits_empty_optionals(self):
        data = make_finding().to_dict()
        assert "remediation" not in data
        assert "learn_key" not in data
        assert "details" not in data


class TestSkipLog:

    def test_classifies_os_errors(self):
        skips = SkipLog()
        skips.record_error("a", PermissionError(13, "Permission denied"))
        skips.record_error("b", FileNotFoundError(2, "No such file"))
        skips.record_error("c", OSError(5, "I/O error"))

        assert skips.reasons_for("a") == [SkipReason.PERMISSION_DENIED]
        assert skips.reasons_for("b") == [SkipReason.VANISHED]
        assert skips.reasons_for("c") == [SkipReason.UNREADABLE]
        assert len(skips) == 3

    def test_skip_to_dict(self):
        skips = SkipLog()
        skips.add("big.md", SkipReason.TOO_LARGE, "2048 bytes")
        assert skips.skips[0].to_dict() == {
            "path": "big.md", "reason": "too_large", "detail": "2048 bytes"
        }


class TestReport:

    def test_total_is_sum_of_findings(self):
        report = Report(findings=(
            make_finding(id="a", affected_paths=["x"], reclaimable_bytes=10),
            make_finding(id="b", affected_paths=["y"], reclaimable_bytes=32),
        ))
        assert report.total_reclaimable_bytes == 42

    def test_report_is_frozen(self):
        report = Report()
        with pytest.raises(Exception):
            report.findings = (make_finding(),)

    def test_empty_report(self):
        report = Report()
        assert report.is_empty
        assert report.to_dict(include_timing=False) == {
            "findings": [], "total_reclaimable_bytes": 0, "skipped": {}
        }

    def test_by_category_keeps_first_seen_order(self):
        report = Report(findings=(
            make_finding(id="1", category="B"),
            make_finding(id="2", category="A"),
            make_finding(id="3", category="B"),
        ))
        groups = report.by_category()
        assert list(groups) == ["B", "A"]
        assert [f.id for f in groups["B"]] == ["1", "3"]

    def test_get_and_autofixable(self, tmp_path):
        fixable = make_finding(id="fix", affected_paths=["a"], remediation=DeleteFiles(tmp_path, ["a"]))
        report = Report(findings=(make_finding(id="plain"), fixable))
        assert report.get("fix") is fixable
        assert report.get("missing") is None
        assert report.autofixable() == [fixable]

    def test_timing_optional_in_dict(self):
        report = Report(scan_duration_ms=12)
        assert report.to_dict()["scan_duration_ms"] == 12
        assert "scan_duration_ms" not in report.to_dict(include_timing=False)
