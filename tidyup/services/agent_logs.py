"""
Agent Log Parser — Read-only view of external cleanup agents

Other tools (scheduled cleaners, volume sweepers, advisors) append
line-oriented logs at well-known paths. This module turns those lines
into AgentLogRecords for the report. It never runs the agents and never
checks whether what they claim actually happened.

Recognized lines:
    Removing: <path> (<N>MB)
    Cleaned: <path> (<N>MB)
    Freed: <N>MB                 (last one wins)
    Usage: <N>% -> <N>%
    RECOMMENDATION: <text>

Anything else, including malformed variants of the above, is ignored.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


REMOVING_RE = re.compile(r"Removing:\s*(.+?)\s*\((\d+)MB\)")
CLEANED_RE = re.compile(r"Cleaned:\s*(.+?)\s*\((\d+)MB\)")
FREED_RE = re.compile(r"Freed:\s*(\d+)MB", re.IGNORECASE)
USAGE_RE = re.compile(r"Usage:\s*(\d+)%\s*->\s*(\d+)%")
RECOMMENDATION_RE = re.compile(r"RECOMMENDATION:\s*(.+)")

# Disk usage (percent, after cleanup) thresholds
USAGE_CRITICAL = 85
USAGE_WARNING = 70


class AgentStatus:
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class AgentAction:
    """One thing an agent says it did (or recommends)."""
    kind: str  # "removed" | "cleaned" | "optimized"
    target: str
    size_mb: Optional[int] = None

    def to_dict(self) -> Dict:
        return {"kind": self.kind, "target": self.target, "size_mb": self.size_mb}


@dataclass
class AgentLogRecord:
    """Parsed contents of one agent log."""
    name: str
    actions: List[AgentAction] = field(default_factory=list)
    freed_mb: int = 0
    disk_usage_before: Optional[int] = None
    disk_usage_after: Optional[int] = None
    recommendations: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.disk_usage_after is not None:
            if self.disk_usage_after > USAGE_CRITICAL:
                return AgentStatus.CRITICAL
            if self.disk_usage_after > USAGE_WARNING:
                return AgentStatus.WARNING
        elif self.recommendations:
            return AgentStatus.WARNING
        return AgentStatus.OK

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "status": self.status,
            "actions": [a.to_dict() for a in self.actions],
            "freed_mb": self.freed_mb,
            "disk_usage_before": self.disk_usage_before,
            "disk_usage_after": self.disk_usage_after,
            "recommendations": list(self.recommendations),
        }


def parse_log_text(name: str, text: str) -> AgentLogRecord:
    """Parse log content line by line into a record."""
    record = AgentLogRecord(name=name)

    for line in text.splitlines():
        match = REMOVING_RE.search(line)
        if match:
            record.actions.append(AgentAction(
                kind="removed",
                target=PurePosixPath(match.group(1)).name or match.group(1),
                size_mb=int(match.group(2))
            ))
            continue

        match = CLEANED_RE.search(line)
        if match:
            record.actions.append(AgentAction(
                kind="cleaned",
                target=PurePosixPath(match.group(1)).name or match.group(1),
                size_mb=int(match.group(2))
            ))
            continue

        match = FREED_RE.search(line)
        if match:
            record.freed_mb = int(match.group(1))
            continue

        match = USAGE_RE.search(line)
        if match:
            record.disk_usage_before = int(match.group(1))
            record.disk_usage_after = int(match.group(2))
            continue

        match = RECOMMENDATION_RE.search(line)
        if match:
            text_value = match.group(1).strip()
            if text_value:
                record.recommendations.append(text_value)
                record.actions.append(AgentAction(kind="optimized", target=text_value))

    return record


class AgentLogParser:
    """
    Parses the logs of configured cleanup agents.

    Usage:
        parser = AgentLogParser({"local": Path("~/.cleanup-log.txt").expanduser()})
        records = parser.parse("all")
    """

    ALL = "all"
    NONE = "none"

    def __init__(self, sources: Dict[str, Path]):
        """
        Args:
            sources: Agent name -> log file path
        """
        self.sources = {name: Path(path) for name, path in sources.items()}

    @property
    def modes(self) -> List[str]:
        return [self.ALL, self.NONE] + list(self.sources)

    def parse(self, mode: str = ALL) -> List[AgentLogRecord]:
        """
        Parse logs for `mode`: "all", "none", or one source name.

        Raises:
            ValueError: Unknown source name
        """
        if mode == self.NONE:
            return []
        if mode == self.ALL:
            names = list(self.sources)
        elif mode in self.sources:
            names = [mode]
        else:
            raise ValueError(f"Unknown agent '{mode}'. Valid: {', '.join(self.modes)}")

        return [self.parse_source(name) for name in names]

    def parse_source(self, name: str) -> AgentLogRecord:
        """Parse one source. Missing or unreadable log = empty record."""
        path = self.sources[name]
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return AgentLogRecord(name=name)
        except OSError as e:
            logger.debug("Cannot read agent log %s: %s", path, e)
            return AgentLogRecord(name=name)
        return parse_log_text(name, text)
