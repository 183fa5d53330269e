"""
Report rendering — npm-audit style summary of findings and agent logs

    Temporary Files:
      • 3 temporary file(s) (12.0KB)

    Agent: local:
      ~ node_modules (512MB)

    found 2 issues, 512MB reclaimable
    run with --live to fix

Agent actions come first, then findings, each grouped by category in
first-seen order. At most MAX_PER_CATEGORY entries are listed per
category.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..core.finding import Report
from ..services.agent_logs import AgentLogRecord, AgentStatus
from ..services.remediator import RemediationOutcome
from .symbols import SymbolSet, format_bytes, get_symbols
from .template import OutputTemplate

MB = 1024 * 1024
MAX_PER_CATEGORY = 6


@dataclass
class AggregateEntry:
    """One line of the report."""
    category: str
    text: str
    size_bytes: int = 0
    severity: Optional[str] = None  # None = agent action


@dataclass
class Aggregate:
    """Everything the report shows, grouped by category."""
    entries: List[AggregateEntry] = field(default_factory=list)
    total_mb: int = 0

    @property
    def total_issues(self) -> int:
        return len(self.entries)

    def by_category(self) -> Dict[str, List[AggregateEntry]]:
        groups: Dict[str, List[AggregateEntry]] = {}
        for entry in self.entries:
            groups.setdefault(entry.category, []).append(entry)
        return groups


def _issues(n: int) -> str:
    return f"{n} issue" if n == 1 else f"{n} issues"


def aggregate(report: Report, agent_records: Sequence[AgentLogRecord] = ()) -> Aggregate:
    """Merge agent log records and scan findings into report entries."""
    result = Aggregate()

    for record in agent_records:
        category = f"Agent: {record.name}"
        for action in record.actions:
            size = (action.size_mb or 0) * MB
            result.entries.append(AggregateEntry(category=category, text=action.target, size_bytes=size))
        if record.disk_usage_after is not None and record.status != AgentStatus.OK:
            result.entries.append(AggregateEntry(
                category=category,
                text=f"disk usage {record.disk_usage_before}% -> {record.disk_usage_after}%",
                severity=record.status,
            ))
        result.total_mb += record.freed_mb

    for finding in report.findings:
        result.entries.append(AggregateEntry(
            category=finding.category,
            text=finding.description,
            size_bytes=finding.reclaimable_bytes,
            severity=finding.severity,
        ))
        result.total_mb += round(finding.reclaimable_bytes / MB)

    return result


def format_report(
    agg: Aggregate,
    dry_run: bool = True,
    symbols: Optional[SymbolSet] = None,
    full: bool = False
) -> str:
    """Render an Aggregate for the terminal."""
    if agg.total_issues == 0:
        return "found 0 issues"

    symbols = symbols or get_symbols()
    template = OutputTemplate(symbols=symbols, full=full)

    for category, entries in agg.by_category().items():
        lines = []
        for entry in entries[:MAX_PER_CATEGORY]:
            icon = symbols.agent_action if entry.severity is None else symbols.severity(entry.severity)
            size = f" ({format_bytes(entry.size_bytes)})" if entry.size_bytes > 0 else ""
            lines.append(f"  {icon} {template.truncate(entry.text)}{size}")
        if len(entries) > MAX_PER_CATEGORY:
            lines.append(f"  ... and {len(entries) - MAX_PER_CATEGORY} more")
        template.section(f"{category}:", "\n".join(lines), underline=False)

    template.footer(f"found {_issues(agg.total_issues)}, {agg.total_mb}MB reclaimable")
    if dry_run:
        template.footer("run with --live to fix")
    return template.render()


def format_outcome(outcome: RemediationOutcome, symbols: Optional[SymbolSet] = None) -> str:
    """Summarize a remediation pass."""
    symbols = symbols or get_symbols()
    if outcome.cancelled:
        return "nothing selected, no changes made"

    lines = []
    for failure in outcome.failures:
        lines.append(f"{symbols.check_fail} {failure.category}: {failure.message}")
        if failure.output:
            lines.extend(f"    {line}" for line in failure.output.strip().splitlines()[-5:])
    lines.append(f"fixed {_issues(len(outcome.fixed))}, freed {format_bytes(outcome.freed_bytes)}")
    if outcome.failures:
        lines.append(f"{len(outcome.failures)} failed")
    if outcome.remembered:
        lines.append(f"{symbols.check_pass} remembered {outcome.remembered} new choice(s)")
    if outcome.store_error:
        lines.append(f"{symbols.check_warn} choices not saved: {outcome.store_error}")
    return "\n".join(lines)
