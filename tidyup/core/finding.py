"""
Finding — Atomic unit of detection output

A Finding is one detected issue or cleanup opportunity. Findings are
grouped into a Report, which is immutable once produced: every scan
builds a new one.

Invariants (enforced at construction):
- severity is one of critical | warning | info | suggestion
- reclaimable_bytes > 0 requires at least one affected path
- autofixable is derived from remediation, so a finding without a
  remediation can never claim to be fixable
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..services.remediation import Remediation


class Severity:
    """Severity levels. Ordinal for display only, not for sorting."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUGGESTION = "suggestion"

    ALL = (CRITICAL, WARNING, INFO, SUGGESTION)


def learn_key(base: str, version: int = 1) -> str:
    """
    Build a versioned learn key.

    A detector bumps its version when the meaning of its remediation
    changes, so approvals given for the old behavior stop matching.

    Example:
        learn_key("backup-files")     -> "backup-files@v1"
        learn_key("backup-files", 2)  -> "backup-files@v2"
    """
    return f"{base}@v{version}"


@dataclass
class Finding:
    """A single detected issue."""
    id: str
    severity: str
    category: str
    description: str
    affected_paths: List[str] = field(default_factory=list)
    reclaimable_bytes: int = 0
    remediation: Optional['Remediation'] = None
    learn_key: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    pre_approved: bool = False  # Computed by the scanner, never persisted

    def __post_init__(self):
        if self.severity not in Severity.ALL:
            raise ValueError(
                f"Unknown severity '{self.severity}'. Valid: {', '.join(Severity.ALL)}"
            )
        if self.reclaimable_bytes < 0:
            raise ValueError("reclaimable_bytes cannot be negative")
        if self.reclaimable_bytes > 0 and not self.affected_paths:
            raise ValueError(
                f"Finding '{self.id}' reclaims {self.reclaimable_bytes} bytes "
                "but lists no affected paths"
            )

    @property
    def autofixable(self) -> bool:
        return self.remediation is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
            "affected_paths": list(self.affected_paths),
            "reclaimable_bytes": self.reclaimable_bytes,
            "autofixable": self.autofixable,
            "pre_approved": self.pre_approved,
        }
        if self.remediation is not None:
            data["remediation"] = self.remediation.summary
        if self.learn_key:
            data["learn_key"] = self.learn_key
        if self.details:
            data["details"] = self.details
        return data


# =============================================================================
# Skip Tracking
# =============================================================================

class SkipReason(str, Enum):
    """Why a path was left out of a detector's results."""
    PERMISSION_DENIED = "permission_denied"
    VANISHED = "vanished"
    UNREADABLE = "unreadable"
    UNDECODABLE = "undecodable"
    TOO_LARGE = "too_large"
    DETECTOR_FAILED = "detector_failed"


@dataclass(frozen=True)
class Skip:
    """One skipped path."""
    path: str
    reason: SkipReason
    detail: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "reason": self.reason.value, "detail": self.detail}


class SkipLog:
    """
    Accumulator of skipped paths for one detector run.

    Scanning is resilient: an unreadable file never aborts a detector.
    The log makes that resilience observable, so callers (and tests)
    can see which paths were dropped and why.
    """

    def __init__(self):
        self._skips: List[Skip] = []

    def add(self, path, reason: SkipReason, detail: str = "") -> None:
        self._skips.append(Skip(path=str(path), reason=reason, detail=detail))

    def record_error(self, path, error: OSError) -> None:
        """Classify an OSError and record it."""
        if isinstance(error, PermissionError):
            reason = SkipReason.PERMISSION_DENIED
        elif isinstance(error, FileNotFoundError):
            reason = SkipReason.VANISHED
        else:
            reason = SkipReason.UNREADABLE
        self.add(path, reason, error.strerror or str(error))

    def reasons_for(self, path) -> List[SkipReason]:
        return [s.reason for s in self._skips if s.path == str(path)]

    @property
    def skips(self) -> Tuple[Skip, ...]:
        return tuple(self._skips)

    def __len__(self) -> int:
        return len(self._skips)

    def __iter__(self):
        return iter(self._skips)


# =============================================================================
# Report
# =============================================================================

@dataclass(frozen=True)
class Report:
    """Result of one scan. Immutable; a new scan produces a new Report."""
    findings: Tuple[Finding, ...] = ()
    scan_duration_ms: int = 0
    skipped: Dict[str, Tuple[Skip, ...]] = field(default_factory=dict)

    @property
    def total_reclaimable_bytes(self) -> int:
        return sum(f.reclaimable_bytes for f in self.findings)

    @property
    def is_empty(self) -> bool:
        return not self.findings

    def autofixable(self) -> List[Finding]:
        return [f for f in self.findings if f.autofixable]

    def get(self, finding_id: str) -> Optional[Finding]:
        for f in self.findings:
            if f.id == finding_id:
                return f
        return None

    def by_category(self) -> Dict[str, List[Finding]]:
        """Group findings by category, preserving first-seen order."""
        groups: Dict[str, List[Finding]] = {}
        for f in self.findings:
            groups.setdefault(f.category, []).append(f)
        return groups

    def to_dict(self, include_timing: bool = True) -> Dict[str, Any]:
        data = {
            "findings": [f.to_dict() for f in self.findings],
            "total_reclaimable_bytes": self.total_reclaimable_bytes,
            "skipped": {
                detector: [s.to_dict() for s in skips]
                for detector, skips in self.skipped.items() if skips
            },
        }
        if include_timing:
            data["scan_duration_ms"] = self.scan_duration_ms
        return data
