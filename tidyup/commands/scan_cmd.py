"""
ScanCommand — Scan, report, and optionally fix

Dry run by default: nothing on disk changes unless --live is given.
With --live the user picks what to fix (or, with --no-interactive,
only previously approved items are fixed).
"""

import json
import sys

from ..commands.base import BaseCommand
from ..preferences import PreferenceStoreError
from ..presentation.report import aggregate, format_outcome, format_report
from ..presentation.symbols import safe_print
from ..services.remediator import ConsolePrompter, Remediator


class ScanCommand(BaseCommand):
    """Runs the scanner and, in live mode, the remediator."""

    def scan(
        self,
        live: bool = False,
        interactive: bool = True,
        deep: bool = False,
        quiet: bool = False,
        agent: str = "all",
        as_json: bool = False
    ) -> int:
        """
        Args:
            live: Allow remediation after the report
            interactive: Prompt for selection (False = pre-approved only)
            deep: Run deep-only detectors too
            quiet: No progress output
            agent: Agent log mode ("all", "none" or a source name)
            as_json: Print the report as JSON instead of text

        Returns:
            Exit code
        """
        symbols = self.symbols

        try:
            records = self.agent_logs.parse(agent)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        # Unreadable preferences must not block a scan, only learning
        preferences = self.preferences
        try:
            approved = preferences.load()
        except PreferenceStoreError as e:
            print(f"{symbols.check_warn} {e}; learned choices are ignored and will not be saved",
                  file=sys.stderr)
            approved = set()
            preferences = None

        if not quiet and not as_json:
            print("Scanning project...", file=sys.stderr)

        report = self.scanner.scan(self.project_dir, deep=deep, approved=approved)

        if as_json:
            payload = {
                "report": report.to_dict(),
                "agents": [r.to_dict() for r in records],
            }
            print(json.dumps(payload, indent=2, sort_keys=True))
            return 0

        safe_print(format_report(aggregate(report, records), dry_run=not live, symbols=symbols))

        if not live:
            return 0

        remediator = Remediator(ConsolePrompter(symbols), preferences=preferences, symbols=symbols)
        if interactive:
            if not report.autofixable():
                print("Nothing can be fixed automatically.")
                return 0
            print()
            outcome = remediator.run(list(report.findings))
        else:
            outcome = remediator.run_unattended(list(report.findings))

        safe_print(format_outcome(outcome, symbols))
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

def register_parser(subparsers):
    """Register scan command parser."""
    p = subparsers.add_parser('scan', help='Scan the project for cleanup opportunities')
    p.add_argument('--live', action='store_true',
                   help='Fix selected items after the report (default: dry run)')
    p.add_argument('--no-interactive', dest='interactive', action='store_false',
                   help='With --live: fix only previously approved items, no prompts')
    p.add_argument('--deep', action='store_true',
                   help='Also check git-ignored files, stale branches, large files, duplicate dirs')
    p.add_argument('--quiet', '-q', action='store_true',
                   help='No progress output')
    p.add_argument('--agent', default='all', metavar='NAME',
                   help="Agent logs to include: all, none, or a source name (default: all)")
    p.add_argument('--json', dest='as_json', action='store_true',
                   help='Print the report as JSON (never fixes anything)')
    return p


def handle(cli, args):
    """Handle scan command dispatch."""
    if args.as_json and args.live:
        print("Error: --json cannot be combined with --live", file=sys.stderr)
        return 2
    return cli._scan_cmd.scan(
        live=args.live,
        interactive=args.interactive,
        deep=args.deep,
        quiet=args.quiet,
        agent=args.agent,
        as_json=args.as_json,
    )
