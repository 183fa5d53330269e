"""
Symbols — Visual vocabulary for severities and states

Progressive enhancement: Unicode when supported, ASCII fallback.
Configurable via display.symbols setting.

Also provides safe output utilities:
- safe_print(): Encoding-safe printing for paths and log text
- truncate(): Consistent shortening of long descriptions
- format_bytes(): Human-readable sizes
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Safe Output Utilities
# =============================================================================

# Common Unicode to ASCII replacements for display
UNICODE_TO_ASCII = {
    '→': '->',
    '…': '...',
    '–': '-',
    '•': '*',
    '✓': '[OK]',
    '⚠': '[!]',
    '✗': '[x]',
    '☑': '[x]',
    '☐': '[ ]',
}


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """
    Print with graceful encoding fallback.

    File names and agent log lines can hold characters the terminal
    cannot encode. Known symbols are replaced with ASCII equivalents,
    anything else with '?'.

    Args:
        text: Text to print (may contain any Unicode)
        end: String appended after text (default: newline)
        file: Output stream (default: sys.stdout)
    """
    if file is None:
        file = sys.stdout

    try:
        print(text, end=end, file=file)
    except UnicodeEncodeError:
        safe_text = text
        for unicode_char, ascii_equiv in UNICODE_TO_ASCII.items():
            safe_text = safe_text.replace(unicode_char, ascii_equiv)

        try:
            print(safe_text, end=end, file=file)
        except UnicodeEncodeError:
            encoding = getattr(file, 'encoding', 'utf-8') or 'utf-8'
            encoded = safe_text.encode(encoding, errors='replace')
            print(encoded.decode(encoding), end=end, file=file)


SUMMARY_LENGTH = 100  # Default for finding descriptions


def truncate(text: str, length: int = SUMMARY_LENGTH, full: bool = False) -> str:
    """
    Truncate text with ellipsis, respecting full mode.

    Examples:
        truncate("Short", 50)                 -> "Short"
        truncate("x" * 60, 50)                -> "x" * 47 + "..."
        truncate("Any length", 5, full=True)  -> "Any length"
    """
    if not text:
        return ""
    if full or len(text) <= length:
        return text
    if length <= 3:
        return text[:length]
    return text[:length - 3] + "..."


def format_bytes(size: int) -> str:
    """
    Human-readable byte count (binary units).

    Examples:
        format_bytes(512)          -> "512B"
        format_bytes(12288)        -> "12.0KB"
        format_bytes(5 * 1024**2)  -> "5.0MB"
    """
    if size < 1024:
        return f"{size}B"
    value = float(size)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024:
            break
    return f"{value:.1f}{unit}"


# =============================================================================
# Symbol Sets
# =============================================================================

@dataclass(frozen=True)
class SymbolSet:
    """Complete set of symbols for report output."""
    # Severities
    critical: str
    warning: str
    info: str
    suggestion: str

    # Agent actions
    agent_action: str

    # Status markers
    check_pass: str
    check_warn: str
    check_fail: str
    arrow: str
    bullet: str

    # Selection
    checked: str
    unchecked: str

    # Text truncation
    ellipsis: str

    def severity(self, level: str) -> str:
        """Icon for a severity level (bullet for unknown levels)."""
        return getattr(self, level) if level in SEVERITY_NAMES else self.bullet


SEVERITY_NAMES = ("critical", "warning", "info", "suggestion")


UNICODE = SymbolSet(
    critical='✗',
    warning='⚠',
    info='•',
    suggestion='→',
    agent_action='~',
    check_pass='✓',
    check_warn='⚠',
    check_fail='✗',
    arrow='→',
    bullet='•',
    checked='☑',
    unchecked='☐',
    ellipsis='…',
)

ASCII = SymbolSet(
    critical='[x]',
    warning='[!]',
    info='[i]',
    suggestion='[>]',
    agent_action='~',
    check_pass='[OK]',
    check_warn='[!]',
    check_fail='[ERR]',
    arrow='->',
    bullet='*',
    checked='[x]',
    unchecked='[ ]',
    ellipsis='...',
)


def supports_unicode() -> bool:
    """
    Check if environment likely supports Unicode output.

    Conservative: defaults to ASCII if uncertain.
    """
    # Explicit environment override
    if os.environ.get('TIDYUP_ASCII_ONLY', '').lower() in ('1', 'true', 'yes'):
        return False
    if os.environ.get('TIDYUP_UNICODE', '').lower() in ('1', 'true', 'yes'):
        return True

    stdout_encoding = getattr(sys.stdout, 'encoding', None)
    if stdout_encoding:
        encoding_lower = stdout_encoding.lower().replace('-', '').replace('_', '')
        if encoding_lower.startswith('cp') or encoding_lower in ('ascii', 'latin1', 'iso88591'):
            return False
        if 'utf' in encoding_lower:
            return True

    lang = os.environ.get('LANG', '').lower()
    lc_all = os.environ.get('LC_ALL', '').lower()
    if 'utf-8' in lang or 'utf8' in lang or 'utf-8' in lc_all or 'utf8' in lc_all:
        return True

    # Default: ASCII for safety
    return False


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Get appropriate symbol set based on preference or auto-detection.

    Args:
        preference: "unicode", "ascii", or "auto" (None = auto)
    """
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII
