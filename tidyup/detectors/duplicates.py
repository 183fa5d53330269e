"""
Duplicate Content — Files that are very likely copies of each other

Grouping uses core.fingerprint (prefix hash + length). Matches are
reported as likely duplicates: files that only differ past the hashed
prefix would be grouped too.
"""

from pathlib import Path
from typing import List

from ..core.finding import Finding, Severity, SkipLog
from ..core.fingerprint import group_duplicates
from ..core.walker import relpath
from .base import Detector, ScanOptions
from .disk import LOCKFILES, is_ephemeral


class DuplicateContentDetector(Detector):
    id = "duplicate-content"
    category = "Duplicate Files"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        settings = options.settings
        walker = self.walker(root, options, skips)
        candidates = [
            p for p in walker.all_files(settings.text_depth)
            # Ephemeral files and lockfiles are reported by their own detectors
            if not is_ephemeral(p.name) and p.name not in LOCKFILES
        ]

        groups = group_duplicates(
            candidates,
            min_size=settings.duplicate_min_bytes,
            prefix_bytes=settings.fingerprint_prefix_bytes,
            skips=skips
        )
        if not groups:
            return []

        redundant = [relpath(root, p) for g in groups for p in g.redundant]
        reclaimable = sum(g.size * len(g.redundant) for g in groups)
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=(
                f"{len(groups)} set(s) of likely identical files "
                f"({len(redundant)} redundant cop{'y' if len(redundant) == 1 else 'ies'})"
            ),
            affected_paths=redundant,
            reclaimable_bytes=reclaimable,
            details={
                "groups": [
                    {
                        "fingerprint": g.fingerprint,
                        "size": g.size,
                        "count": g.count,
                        "files": [relpath(root, p) for p in g.files],
                    }
                    for g in groups
                ],
            },
        )]


DETECTORS = [DuplicateContentDetector]
