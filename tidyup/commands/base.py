"""
BaseCommand — Shared foundation for all CLI commands

Commands receive the CLI instance and access its resources through
properties instead of building their own.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..cli import TidyCLI


class BaseCommand:
    """Base class for CLI commands with access to shared resources."""

    def __init__(self, cli: 'TidyCLI'):
        self._cli = cli

    # -------------------------------------------------------------------------
    # Core resources
    # -------------------------------------------------------------------------

    @property
    def project_dir(self):
        """Project root directory (the scan root)."""
        return self._cli.project_dir

    @property
    def config(self):
        """Loaded configuration."""
        return self._cli.config

    @property
    def config_manager(self):
        return self._cli.config_manager

    @property
    def symbols(self):
        """Symbol set for display (Unicode/ASCII)."""
        return self._cli.symbols

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    @property
    def scanner(self):
        """Scanner with the configured detector registry."""
        return self._cli.scanner

    @property
    def preferences(self):
        """Store of learned cleanup decisions."""
        return self._cli.preferences

    @property
    def agent_logs(self):
        """Parser for external cleanup-agent logs."""
        return self._cli.agent_logs
