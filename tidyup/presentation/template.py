"""
OutputTemplate — Consistent CLI output structure

Builder for command output with an optional header, titled sections
and footer lines.

Usage:
    from tidyup.presentation.template import OutputTemplate

    template = OutputTemplate()
    template.header("TIDYUP", "Preferences")
    template.section("LEARNED", template.format_list(keys))
    template.footer("3 learned key(s)")
    print(template.render())

Design:
    - Standalone utility, no knowledge of findings
    - Terminal-width aware
    - Symbol-agnostic (Unicode/ASCII)
"""

import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .symbols import SymbolSet, get_symbols


# =============================================================================
# Constants
# =============================================================================

HEADER_CHAR = "="
SECTION_CHAR = "-"
DEFAULT_WIDTH = 80
MAX_WIDTH = 100


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class TemplateSection:
    """A titled section of output."""
    title: str
    content: str
    underline: bool = True


@dataclass
class TemplateLegend:
    """Legend mapping symbols to meanings."""
    items: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        if not self.items:
            return ""
        parts = [f"{symbol} {meaning}" for symbol, meaning in self.items.items()]
        return "Legend: " + "  ".join(parts)


# =============================================================================
# OutputTemplate
# =============================================================================

class OutputTemplate:
    """
    Builder for structured CLI output.

    Thread-safe: Each instance is independent.
    """

    def __init__(
        self,
        symbols: Optional[SymbolSet] = None,
        width: Optional[int] = None,
        full: bool = False
    ):
        """
        Args:
            symbols: SymbolSet for visual elements (auto-detect if None)
            width: Output width (terminal width, capped, if None)
            full: If True, don't truncate content
        """
        self.symbols = symbols or get_symbols()
        self.width = width or min(shutil.get_terminal_size((DEFAULT_WIDTH, 24)).columns, MAX_WIDTH)
        self.full = full

        self._title: Optional[str] = None
        self._subtitle: Optional[str] = None
        self._legend: Optional[TemplateLegend] = None
        self._sections: List[TemplateSection] = []
        self._footer: List[str] = []

    # =========================================================================
    # Builder Methods
    # =========================================================================

    def header(self, title: str, subtitle: Optional[str] = None) -> "OutputTemplate":
        self._title = title
        self._subtitle = subtitle
        return self

    def legend(self, items: Dict[str, str]) -> "OutputTemplate":
        """Set legend mapping symbols to meanings, e.g. {"⚠": "warning"}."""
        self._legend = TemplateLegend(items=items)
        return self

    def section(self, title: str, content: str, underline: bool = True) -> "OutputTemplate":
        """
        Add a titled section.

        Args:
            title: Section title
            content: Section content (can be multiline)
            underline: Draw a rule under the title
        """
        self._sections.append(TemplateSection(title=title, content=content, underline=underline))
        return self

    def footer(self, *lines: str) -> "OutputTemplate":
        """Append footer lines (summary, hints)."""
        self._footer.extend(line for line in lines if line)
        return self

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self) -> str:
        lines: List[str] = []

        if self._title:
            lines.extend(self._render_header())

        for section in self._sections:
            lines.extend(self._render_section(section))

        lines.extend(self._footer)

        # No trailing blank lines
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines)

    def _render_header(self) -> List[str]:
        border = HEADER_CHAR * self.width
        title_line = f"{self._title} - {self._subtitle}" if self._subtitle else self._title
        lines = [border, title_line, border]

        if self._legend:
            legend_text = self._legend.render()
            if legend_text:
                lines.append(legend_text)

        lines.append("")
        return lines

    def _render_section(self, section: TemplateSection) -> List[str]:
        lines: List[str] = []
        if section.title:
            lines.append(section.title)
            if section.underline:
                lines.append(SECTION_CHAR * len(section.title))
        if section.content:
            lines.append(section.content)
        lines.append("")
        return lines

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def truncate(self, text: str, length: Optional[int] = None) -> str:
        """Truncate text with the symbol set's ellipsis (no-op when full)."""
        if not text:
            return ""
        if self.full:
            return text

        max_len = length or (self.width - 4)
        if len(text) <= max_len:
            return text

        ellipsis = self.symbols.ellipsis
        return text[:max_len - len(ellipsis)] + ellipsis

    def format_list(self, items: List[str], bullet: Optional[str] = None, indent: str = "") -> str:
        if not items:
            return ""
        bullet = bullet or self.symbols.bullet
        return "\n".join(f"{indent}{bullet} {item}" for item in items)
