"""
Detector — Shared foundation for all detectors

A detector inspects a project root and returns Findings. It never
mutates anything: remediations it attaches are executed later, and
only after the user approves them.

Detectors receive everything they need through ScanOptions (settings,
git access, deep flag) and record unreadable paths in the SkipLog they
are handed instead of raising.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, TYPE_CHECKING

from ..core.finding import Finding, SkipLog
from ..core.walker import FileWalker

if TYPE_CHECKING:
    from ..config import ScanSettings
    from ..services.git import GitIntegration

logger = logging.getLogger(__name__)


@dataclass
class ScanOptions:
    """Inputs shared by every detector in one scan."""
    settings: 'ScanSettings'
    git: 'GitIntegration'
    deep: bool = False


@dataclass
class DetectorResult:
    """Findings and skipped paths from one detector run."""
    detector_id: str
    findings: List[Finding] = field(default_factory=list)
    skips: SkipLog = field(default_factory=SkipLog)


class Detector:
    """
    Base class for detectors.

    Subclasses set `id` and `category` and implement detect().
    `deep_only` detectors are skipped unless the scan is deep.
    """

    id: str = ""
    category: str = ""
    deep_only: bool = False

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        raise NotImplementedError

    def run(self, root: Path, options: ScanOptions) -> DetectorResult:
        """Run detect() with a fresh SkipLog."""
        skips = SkipLog()
        findings = self.detect(Path(root), options, skips)
        logger.debug("%s: %d finding(s), %d skipped", self.id, len(findings), len(skips))
        return DetectorResult(detector_id=self.id, findings=findings, skips=skips)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def walker(self, root: Path, options: ScanOptions, skips: SkipLog) -> FileWalker:
        return FileWalker(root, exclude_dirs=options.settings.exclude_dirs, skips=skips)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
