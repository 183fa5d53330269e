"""
Presentation — Terminal output for tidyup

Contains:
- symbols: Unicode/ASCII symbol sets, safe_print, size formatting
- template: OutputTemplate builder
- report: Aggregation and rendering of scan results
"""

from .symbols import SymbolSet, get_symbols, safe_print, truncate, format_bytes
from .template import OutputTemplate

__all__ = [
    "SymbolSet", "get_symbols", "safe_print", "truncate", "format_bytes",
    "OutputTemplate",
]
