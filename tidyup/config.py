"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Project config (.tidyup/config.yaml)
  2. User config (~/.tidyup/config.yaml)
  3. Environment variables
  4. Defaults

The user config file also carries the learned cleanup preferences
(cleanup.safe_to_delete). That key is owned by PreferenceStore; saving
config here merges into the existing file so it is never clobbered.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .core.walker import DEFAULT_EXCLUDE_DIRS, DEFAULT_MAX_TEXT_BYTES
from .presentation.symbols import get_symbols


MB = 1024 * 1024

DEFAULT_DEPRECATED_TERMS: Dict[str, str] = {
    "whitelist": "allowlist",
    "blacklist": "denylist",
    "master branch": "main branch",
    "sanity check": "confidence check",
}

# Label -> regex for local reimplementations of shared services
DEFAULT_ROGUE_PATTERNS: Dict[str, str] = {
    "direct GitHub API call": r"(?:fetch|axios\.\w+|requests\.\w+)\(\s*[\x22\x27\x60]https://api\.github\.com",
    "direct Notion API call": r"(?:fetch|axios\.\w+|requests\.\w+)\(\s*[\x22\x27\x60]https://api\.notion\.com",
    "local JWT signing": r"\bjwt\.(?:sign|encode)\(|[\x22\x27]jsonwebtoken[\x22\x27]",
    "ad-hoc UUID generation": r"from\s+[\x22\x27]uuid[\x22\x27]|require\(\s*[\x22\x27]uuid[\x22\x27]\s*\)|^\s*import\s+uuid\b",
}

DEFAULT_AGENT_LOG_SOURCES: Dict[str, str] = {
    "local": "~/.cleanup-log.txt",
    "volume": "/Volumes/shared/temp/.cleanup.log",
    "advisor": "~/.tidyup/insights/advisor.log",
}


def tidyup_home() -> Path:
    """User-level tidyup directory (TIDYUP_HOME overrides ~/.tidyup)."""
    override = os.environ.get("TIDYUP_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".tidyup"


@dataclass
class ScanSettings:
    """Detector thresholds, depth presets and traversal exclusions."""
    # Depth presets (root = 0). Deeper = more coverage, slower scans.
    shallow_depth: int = 4      # workspace / package-boundary checks
    text_depth: int = 5         # text-pattern hygiene checks
    deep_depth: int = 10        # broad file-type sweeps
    exclude_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))

    # Size thresholds
    dependency_threshold_mb: int = 500
    build_threshold_mb: int = 10
    large_file_mb: int = 5
    ignored_threshold_mb: int = 1
    duplicate_min_bytes: int = 1024
    fingerprint_prefix_bytes: int = 10_000
    max_text_bytes: int = DEFAULT_MAX_TEXT_BYTES

    # Git
    stale_branch_days: int = 90
    primary_branches: List[str] = field(default_factory=lambda: ["main", "master"])

    # Hygiene
    deprecated_terms: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DEPRECATED_TERMS))
    rogue_patterns: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ROGUE_PATTERNS))

    # Execution
    parallel: bool = False
    workers: int = 4

    def validate(self) -> Optional[str]:
        """Validate settings. Returns error message or None if valid."""
        for name in ("shallow_depth", "text_depth", "deep_depth"):
            if getattr(self, name) < 0:
                return f"scan.{name} must be >= 0"
        if self.workers < 1:
            return "scan.workers must be >= 1"
        if self.stale_branch_days < 1:
            return "scan.stale_branch_days must be >= 1"
        for label, pattern in self.rogue_patterns.items():
            try:
                re.compile(pattern, re.MULTILINE)
            except re.error as e:
                return f"scan.rogue_patterns['{label}'] is not a valid regex: {e}"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"

    def validate(self) -> Optional[str]:
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"
        return None


@dataclass
class AgentLogConfig:
    """Where external cleanup agents write their logs."""
    sources: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_AGENT_LOG_SOURCES))

    def resolved(self) -> Dict[str, Path]:
        return {name: Path(p).expanduser() for name, p in self.sources.items()}


@dataclass
class Config:
    """Application configuration."""
    scan: ScanSettings = field(default_factory=ScanSettings)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    agent_logs: AgentLogConfig = field(default_factory=AgentLogConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scan": {
                "shallow_depth": self.scan.shallow_depth,
                "text_depth": self.scan.text_depth,
                "deep_depth": self.scan.deep_depth,
                "exclude_dirs": list(self.scan.exclude_dirs),
                "dependency_threshold_mb": self.scan.dependency_threshold_mb,
                "build_threshold_mb": self.scan.build_threshold_mb,
                "large_file_mb": self.scan.large_file_mb,
                "ignored_threshold_mb": self.scan.ignored_threshold_mb,
                "duplicate_min_bytes": self.scan.duplicate_min_bytes,
                "fingerprint_prefix_bytes": self.scan.fingerprint_prefix_bytes,
                "max_text_bytes": self.scan.max_text_bytes,
                "stale_branch_days": self.scan.stale_branch_days,
                "primary_branches": list(self.scan.primary_branches),
                "deprecated_terms": dict(self.scan.deprecated_terms),
                "rogue_patterns": dict(self.scan.rogue_patterns),
                "parallel": self.scan.parallel,
                "workers": self.scan.workers,
            },
            "display": {
                "symbols": self.display.symbols,
            },
            "agent_logs": {
                "sources": dict(self.agent_logs.sources),
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary. Unknown keys are ignored."""
        scan_data = data.get("scan") or {}
        display_data = data.get("display") or {}
        agent_data = data.get("agent_logs") or {}

        defaults = ScanSettings()
        scan_kwargs = {
            key: scan_data[key]
            for key in defaults.__dataclass_fields__
            if key in scan_data
        }

        sources = dict(DEFAULT_AGENT_LOG_SOURCES)
        sources.update(agent_data.get("sources") or {})

        return cls(
            scan=ScanSettings(**scan_kwargs),
            display=DisplayConfig(symbols=display_data.get("symbols", "auto")),
            agent_logs=AgentLogConfig(sources=sources),
        )

    def validate(self) -> Optional[str]:
        return self.scan.validate() or self.display.validate()


class ConfigError(Exception):
    """Configuration file exists but cannot be used."""


# Settings that `tidyup config --set` accepts, with their parsers
_SETTABLE = {
    "scan.shallow_depth": int,
    "scan.text_depth": int,
    "scan.deep_depth": int,
    "scan.dependency_threshold_mb": int,
    "scan.build_threshold_mb": int,
    "scan.large_file_mb": int,
    "scan.ignored_threshold_mb": int,
    "scan.duplicate_min_bytes": int,
    "scan.stale_branch_days": int,
    "scan.workers": int,
    "scan.parallel": lambda v: v.lower() in ("true", "1", "yes", "on"),
    "display.symbols": str,
}


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Project config (.tidyup/config.yaml)
      2. User config (~/.tidyup/config.yaml)
      3. Environment
      4. Defaults
    """

    PROJECT_CONFIG_DIR = ".tidyup"
    CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.user_dir = Path(user_dir) if user_dir else tidyup_home()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_dir / self.CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        # Layer 1: Environment (just above defaults)
        config_data = self._from_environment()

        # Layer 2: User config
        config_data = self._merge(config_data, self._read_yaml(self.user_config_path))

        # Layer 3: Project config (highest priority)
        config_data = self._merge(config_data, self._read_yaml(self.project_config_path))

        try:
            config = Config.from_dict(config_data)
            error = config.validate()
        except (TypeError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        if error:
            raise ConfigError(error)

        self._config = config
        return self._config

    def _from_environment(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if os.environ.get("TIDYUP_PARALLEL"):
            data.setdefault("scan", {})["parallel"] = (
                os.environ["TIDYUP_PARALLEL"].lower() in ("1", "true", "yes", "on")
            )
        if os.environ.get("TIDYUP_STALE_DAYS"):
            try:
                data.setdefault("scan", {})["stale_branch_days"] = int(os.environ["TIDYUP_STALE_DAYS"])
            except ValueError:
                raise ConfigError(
                    f"TIDYUP_STALE_DAYS must be an integer, got '{os.environ['TIDYUP_STALE_DAYS']}'"
                )
        if os.environ.get("TIDYUP_SYMBOLS"):
            data.setdefault("display", {})["symbols"] = os.environ["TIDYUP_SYMBOLS"]
        return data

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        """Read a YAML mapping. Missing file = empty; malformed file = ConfigError."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e.strerror or e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def _write_merged(self, path: Path, config: Config):
        """Write config, keeping keys this class does not own."""
        existing = self._read_yaml(path)
        merged = self._merge(existing, config.to_dict())
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.safe_dump(merged, f, default_flow_style=False, sort_keys=True)

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self._write_merged(self.project_config_path, config)
        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self._write_merged(self.user_config_path, config)
        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "scan.stale_branch_days")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        if key.count(".") != 1:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'scan.deep_depth')"
        if key not in _SETTABLE:
            return f"Unknown setting: {key}. Valid: {', '.join(sorted(_SETTABLE))}"

        try:
            parsed = _SETTABLE[key](value)
        except ValueError:
            return f"Invalid value for {key}: {value}"

        config = self.load()
        section, setting = key.split(".")
        setattr(getattr(config, section), setting, parsed)

        error = config.validate()
        if error:
            self._config = None  # Drop the invalid in-memory change
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)
        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()
        parts = key.split(".")
        if len(parts) != 2:
            return None
        section = getattr(config, parts[0], None)
        if section is None or not hasattr(section, parts[1]):
            return None
        value = getattr(section, parts[1])
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)
        scan = config.scan

        lines = [
            "Configuration:",
            "",
            "Scan:",
            f"  Depths: shallow={scan.shallow_depth} text={scan.text_depth} deep={scan.deep_depth}",
            f"  Excluded dirs: {', '.join(scan.exclude_dirs)}",
            f"  Dependency threshold: {scan.dependency_threshold_mb}MB",
            f"  Build artifact threshold: {scan.build_threshold_mb}MB",
            f"  Large file threshold: {scan.large_file_mb}MB",
            f"  Stale branches: {scan.stale_branch_days} days (primary: {', '.join(scan.primary_branches)})",
            f"  Parallel: {scan.parallel} ({scan.workers} workers)",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            "",
            "Agent logs:",
        ]
        for name, path in config.agent_logs.resolved().items():
            marker = symbols.check_pass if path.exists() else symbols.bullet
            lines.append(f"  {marker} {name}: {path}")

        lines.extend([
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ])
        return "\n".join(lines)
