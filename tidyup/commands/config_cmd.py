"""
ConfigCommand — View and set configuration
"""

from ..commands.base import BaseCommand
from ..presentation.template import OutputTemplate


class ConfigCommand(BaseCommand):
    """Configuration display and modification."""

    def show_config(self) -> int:
        template = OutputTemplate(symbols=self.symbols)
        template.header("TIDYUP CONFIG", "Current Configuration")
        template.section("SETTINGS", self.config_manager.display())
        print(template.render())
        return 0

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        """Set a configuration value. Returns 1 when the value is rejected."""
        symbols = self.symbols
        error = self.config_manager.set(key, value, scope)

        template = OutputTemplate(symbols=symbols)
        if error:
            template.header("TIDYUP CONFIG", "Error")
            template.section("ERROR", error)
            print(template.render())
            return 1

        template.header("TIDYUP CONFIG", "Configuration Updated")
        template.section("SETTING", f"Set {key} = {value}")
        if scope == "project":
            template.section("SAVED TO", str(self.config_manager.project_config_path))
        else:
            template.section("SAVED TO", str(self.config_manager.user_config_path))
        template.footer(f"{symbols.check_pass} Configuration saved")
        print(template.render())
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('--set', nargs=2, metavar=('KEY', 'VALUE'),
                   help='Set config value (e.g., --set scan.stale_branch_days 60)')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    if args.set:
        key, value = args.set
        scope = "user" if args.user else "project"
        return cli._config_cmd.set_config(key, value, scope)
    return cli._config_cmd.show_config()
