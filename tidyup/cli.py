"""
CLI — Command interface

Reports by default, changes nothing unless asked (--live), and
remembers what the user approved.

Exit codes:
    0    success (finding issues is still success)
    1    fatal I/O or configuration error
    2    usage error
    130  interrupted
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, ConfigManager
from .preferences import PreferenceStore
from .presentation.symbols import get_symbols
from .services.agent_logs import AgentLogParser
from .services.git import GitIntegration
from .services.scanner import Scanner
from .commands.scan_cmd import ScanCommand
from .commands.prefs_cmd import PrefsCommand
from .commands.config_cmd import ConfigCommand
from . import __version__

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class TidyCLI:
    """Holds the resources every command shares."""

    def __init__(self, project_dir: Path, user_dir: Optional[Path] = None):
        """
        Args:
            project_dir: Project to scan
            user_dir: User-level tidyup directory (default: TIDYUP_HOME or ~/.tidyup)

        Raises:
            ConfigError: Configuration exists but is invalid
        """
        self.project_dir = Path(project_dir).resolve()
        self.config_manager = ConfigManager(self.project_dir, user_dir=user_dir)
        self.config = self.config_manager.load()

        self.symbols = get_symbols(self.config.display.symbols)

        self.git = GitIntegration(self.project_dir)
        self.scanner = Scanner(self.config.scan, git=self.git)

        # Learned choices share the user config file
        self.preferences = PreferenceStore(self.config_manager.user_config_path)

        self.agent_logs = AgentLogParser(self.config.agent_logs.resolved())

        # Command handlers
        self._scan_cmd = ScanCommand(self)
        self._prefs_cmd = PrefsCommand(self)
        self._config_cmd = ConfigCommand(self)


def configure_logging(debug: bool = False):
    """Module loggers go to stderr; only warnings unless --debug."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tidyup",
        description="tidyup -- Project health scanning and cleanup",
        epilog="Dry run by default. Nothing is deleted without --live and your approval."
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("TIDYUP_PROJECT_PATH", "."),
        help='Project directory (default: TIDYUP_PROJECT_PATH or current)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Log debug output (skipped paths, git calls) to stderr'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'tidyup {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Register all commands from command modules (self-registration pattern)
    from .commands import register_all
    register_all(subparsers)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for tidyup.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    configure_logging(args.debug)

    project = Path(args.project)
    if not project.is_dir():
        print(f"Error: project directory not found: {project}", file=sys.stderr)
        return EXIT_ERROR

    from .commands import dispatch
    try:
        cli = TidyCLI(project)
        result = dispatch(args.command, cli, args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    return EXIT_OK if result is None else result


if __name__ == '__main__':
    sys.exit(main())
