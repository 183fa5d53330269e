"""
PrefsCommand — Inspect and prune learned cleanup choices

Learned keys only grow through `scan --live`. This is the one place
they shrink: when a remembered choice should no longer apply.
"""

import sys
from typing import List

from ..commands.base import BaseCommand
from ..preferences import PreferenceStoreError
from ..presentation.template import OutputTemplate


class PrefsCommand(BaseCommand):
    """List, forget or clear learned keys."""

    def show(self) -> int:
        symbols = self.symbols
        try:
            keys = sorted(self.preferences.load())
        except PreferenceStoreError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        template = OutputTemplate(symbols=symbols)
        template.header("TIDYUP PREFS", "Learned Choices")
        if keys:
            template.section("SAFE TO DELETE", template.format_list(keys))
            template.footer(f"{len(keys)} learned key(s) in {self.preferences.path}")
        else:
            template.section("SAFE TO DELETE", "(none yet: run 'tidyup scan --live' and choose to remember)")
        print(template.render())
        return 0

    def forget(self, keys: List[str]) -> int:
        symbols = self.symbols
        try:
            removed = self.preferences.forget(keys)
        except PreferenceStoreError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if removed:
            print(f"{symbols.check_pass} Forgot {removed} key(s)")
        else:
            print("No matching keys learned.")
        return 0

    def clear(self) -> int:
        symbols = self.symbols
        try:
            removed = self.preferences.clear()
        except PreferenceStoreError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"{symbols.check_pass} Cleared {removed} learned key(s)")
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

def register_parser(subparsers):
    """Register prefs command parser."""
    p = subparsers.add_parser('prefs', help='List or prune learned cleanup choices')
    group = p.add_mutually_exclusive_group()
    group.add_argument('--forget', nargs='+', metavar='KEY',
                       help='Forget learned keys (e.g. backup-files@v1)')
    group.add_argument('--clear', action='store_true',
                       help='Forget every learned key')
    return p


def handle(cli, args):
    """Handle prefs command dispatch."""
    if args.clear:
        return cli._prefs_cmd.clear()
    if args.forget:
        return cli._prefs_cmd.forget(args.forget)
    return cli._prefs_cmd.show()
