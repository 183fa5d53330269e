"""
tidyup — Project health scanning and cleanup

Finds reclaimable disk space and code-hygiene problems, reports them,
and fixes the ones you approve. Remembers what you approved.

Usage:
    tidyup scan                    # dry run: report only
    tidyup scan --deep             # include git-ignored, stale branches, large files
    tidyup scan --live             # pick items to fix interactively
    tidyup scan --live --no-interactive   # fix only previously approved items
    tidyup prefs                   # list learned choices
    tidyup prefs --forget KEY
    tidyup config --set scan.stale_branch_days 60
"""

__version__ = "0.1.0"

# Core layer (data)
from .core.finding import Finding, Report, Severity, Skip, SkipLog, SkipReason, learn_key
from .core.walker import FileWalker, DEFAULT_EXCLUDE_DIRS
from .core.fingerprint import fingerprint_bytes, group_duplicates, DuplicateGroup

# Services layer
from .services.git import GitIntegration
from .services.remediation import Remediation, RemediationError
from .services.scanner import Scanner
from .services.agent_logs import AgentLogParser, AgentLogRecord, AgentAction
from .services.remediator import Remediator, RemediatorState, RemediationOutcome, ConsolePrompter

# Detectors
from .detectors import Detector, ScanOptions, load_detectors

# Preferences
from .preferences import PreferenceStore, PreferenceStoreError

# Presentation layer
from .presentation.symbols import get_symbols, SymbolSet, UNICODE, ASCII

# Config (stays at root)
from .config import Config, ConfigManager, ConfigError, ScanSettings, DisplayConfig, AgentLogConfig

__all__ = [
    # Core
    'Finding', 'Report', 'Severity', 'Skip', 'SkipLog', 'SkipReason', 'learn_key',
    'FileWalker', 'DEFAULT_EXCLUDE_DIRS',
    'fingerprint_bytes', 'group_duplicates', 'DuplicateGroup',
    # Services
    'GitIntegration',
    'Remediation', 'RemediationError',
    'Scanner',
    'AgentLogParser', 'AgentLogRecord', 'AgentAction',
    'Remediator', 'RemediatorState', 'RemediationOutcome', 'ConsolePrompter',
    # Detectors
    'Detector', 'ScanOptions', 'load_detectors',
    # Preferences
    'PreferenceStore', 'PreferenceStoreError',
    # Presentation
    'get_symbols', 'SymbolSet', 'UNICODE', 'ASCII',
    # Config
    'Config', 'ConfigManager', 'ConfigError', 'ScanSettings', 'DisplayConfig', 'AgentLogConfig',
]
