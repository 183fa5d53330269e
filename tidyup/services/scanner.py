"""
Scanner — Runs the detector registry over a project and builds a Report

The scan phase is read-only. It:
1. Runs every registered detector (deep-only ones when deep=True)
2. Marks findings whose learn key the user already approved
3. Collects per-detector skips and the scan duration

Detectors are independent, so they can run on a thread pool
(scan.parallel). Findings keep registry order either way.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import ScanSettings
from ..core.finding import Finding, Report, Skip, SkipLog, SkipReason
from ..detectors import Detector, DetectorResult, ScanOptions, load_detectors
from .git import GitIntegration

logger = logging.getLogger(__name__)


class Scanner:
    """Scans one project root with a fixed set of detectors."""

    def __init__(
        self,
        settings: ScanSettings,
        detectors: Optional[List[Detector]] = None,
        git: Optional[GitIntegration] = None
    ):
        """
        Args:
            settings: Thresholds, depths, exclusions, parallelism
            detectors: Detector instances (default: full registry)
            git: Git access (default: GitIntegration at the scanned root)
        """
        self.settings = settings
        self.detectors = detectors if detectors is not None else load_detectors()
        self._git = git

    def active_detectors(self, deep: bool) -> List[Detector]:
        return [d for d in self.detectors if deep or not d.deep_only]

    def scan(self, root: Path, deep: bool = False, approved: Iterable[str] = ()) -> Report:
        """
        Scan a project.

        Args:
            root: Project root directory
            deep: Also run deep-only detectors
            approved: Learn keys from the preference store

        Returns:
            A new Report
        """
        root = Path(root)
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")

        started = time.monotonic()
        options = ScanOptions(
            settings=self.settings,
            git=self._git or GitIntegration(root),
            deep=deep,
        )
        detectors = self.active_detectors(deep)

        if self.settings.parallel and len(detectors) > 1:
            results = self._run_parallel(detectors, root, options)
        else:
            results = [self._run_detector(d, root, options) for d in detectors]

        approved_keys = set(approved)
        findings: List[Finding] = []
        skipped: Dict[str, Tuple[Skip, ...]] = {}
        for result in results:
            for finding in result.findings:
                finding.pre_approved = bool(finding.learn_key) and finding.learn_key in approved_keys
                findings.append(finding)
            if len(result.skips):
                skipped[result.detector_id] = result.skips.skips

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.debug(
            "Scanned %s with %d detector(s): %d finding(s) in %dms",
            root, len(detectors), len(findings), duration_ms
        )
        return Report(findings=tuple(findings), scan_duration_ms=duration_ms, skipped=skipped)

    def _run_parallel(self, detectors: List[Detector], root: Path, options: ScanOptions) -> List[DetectorResult]:
        with ThreadPoolExecutor(
            max_workers=self.settings.workers,
            thread_name_prefix="tidyup-scan-"
        ) as executor:
            futures = [executor.submit(self._run_detector, d, root, options) for d in detectors]
            # Collect in submission order, not completion order
            return [f.result() for f in futures]

    @staticmethod
    def _run_detector(detector: Detector, root: Path, options: ScanOptions) -> DetectorResult:
        """Run one detector; an unexpected error drops its findings, not the report."""
        try:
            return detector.run(root, options)
        except Exception as e:
            logger.warning("Detector %s failed: %s", detector.id, e)
            skips = SkipLog()
            skips.add(root, SkipReason.DETECTOR_FAILED, f"{type(e).__name__}: {e}")
            return DetectorResult(detector_id=detector.id, skips=skips)
