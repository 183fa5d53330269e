"""
Remediator — Interactive fix flow after a live scan

    IDLE -> PRESENTING -> SELECTING -> CONFIRMING -> (REMEMBERING) -> EXECUTING -> DONE

- Only autofixable findings are presented
- Pre-checked: info severity, or already approved in a past run
- Nothing selected -> back to IDLE, nothing touched
- One confirmation for the whole selection (default No)
- Remember? (default Yes) -> keys of the fixes that succeeded are unioned
  into the store after executing
- Each remediation runs independently; a failure is recorded and the
  rest still run

run_unattended() is the non-interactive live mode: it executes only
pre-approved findings and never prompts or learns.

Prompting goes through a prompter object (checkbox/confirm) so tests
can drive the flow without a terminal.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ..core.finding import Finding, Severity
from ..presentation.symbols import SymbolSet, format_bytes, get_symbols, safe_print, truncate
from ..preferences.store import PreferenceStore, PreferenceStoreError

logger = logging.getLogger(__name__)

# Lines of package manager output echoed after a successful fix
OUTPUT_TAIL_LINES = 10


class RemediatorState(Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    SELECTING = "selecting"
    CONFIRMING = "confirming"
    REMEMBERING = "remembering"
    EXECUTING = "executing"
    DONE = "done"


@dataclass
class Choice:
    """One selectable line in a checkbox prompt."""
    label: str
    checked: bool = False


@dataclass
class RemediationFailure:
    finding_id: str
    category: str
    message: str
    exit_code: Optional[int] = None
    output: str = ""


@dataclass
class RemediationOutcome:
    """What a remediation pass did."""
    state: RemediatorState = RemediatorState.IDLE
    fixed: List[Finding] = field(default_factory=list)
    failures: List[RemediationFailure] = field(default_factory=list)
    freed_bytes: int = 0
    remembered: int = 0
    store_error: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self.state == RemediatorState.IDLE


# =============================================================================
# Prompters
# =============================================================================

class ConsolePrompter:
    """input()-based prompts for a terminal session."""

    def __init__(self, symbols: Optional[SymbolSet] = None, input_fn: Callable[[str], str] = input):
        self.symbols = symbols or get_symbols()
        self._input = input_fn

    def checkbox(self, message: str, choices: List[Choice]) -> List[int]:
        """
        Let the user toggle items by number.

        Returns:
            Indices of checked choices
        """
        checked = [c.checked for c in choices]
        while True:
            print(message)
            for i, choice in enumerate(choices):
                box = self.symbols.checked if checked[i] else self.symbols.unchecked
                safe_print(f"  {i + 1:>2}. {box} {choice.label}")
            print("Toggle by number (e.g. '1 3'), [a]ll, [n]one, Enter to continue")

            response = self._input("> ").strip().lower()
            if response == "":
                return [i for i, on in enumerate(checked) if on]
            if response in ("a", "all"):
                checked = [True] * len(choices)
                continue
            if response in ("n", "none"):
                checked = [False] * len(choices)
                continue

            for token in response.replace(",", " ").split():
                if token.isdigit() and 1 <= int(token) <= len(choices):
                    checked[int(token) - 1] = not checked[int(token) - 1]
                else:
                    print(f"Ignoring '{token}': not an item number")

    def confirm(self, message: str, default: bool = False) -> bool:
        hint = "[Y/n]" if default else "[y/N]"
        response = self._input(f"{message} {hint}: ").strip().lower()
        if response == "":
            return default
        return response in ("y", "yes")


# =============================================================================
# Remediator
# =============================================================================

class Remediator:
    """Drives selection, confirmation, execution and learning."""

    def __init__(self, prompter, preferences: Optional[PreferenceStore] = None,
                 symbols: Optional[SymbolSet] = None):
        """
        Args:
            prompter: Object with checkbox(message, choices) and confirm(message, default)
            preferences: Store for learned keys (None = learning disabled)
            symbols: Symbol set for progress output
        """
        self.prompter = prompter
        self.preferences = preferences
        self.symbols = symbols or get_symbols()
        self.state = RemediatorState.IDLE

    @staticmethod
    def default_checked(finding: Finding) -> bool:
        return finding.severity == Severity.INFO or finding.pre_approved

    def _label(self, finding: Finding) -> str:
        size = f" ({format_bytes(finding.reclaimable_bytes)})" if finding.reclaimable_bytes else ""
        return truncate(f"{finding.category}: {finding.description}{size}")

    def run(self, findings: List[Finding]) -> RemediationOutcome:
        """Interactive pass over the autofixable findings."""
        self.state = RemediatorState.PRESENTING
        fixable = [f for f in findings if f.autofixable]
        if not fixable:
            self.state = RemediatorState.IDLE
            return RemediationOutcome(state=self.state)

        self.state = RemediatorState.SELECTING
        choices = [Choice(label=self._label(f), checked=self.default_checked(f)) for f in fixable]
        indices = self.prompter.checkbox("Select items to clean up:", choices)
        selected = [fixable[i] for i in sorted(set(indices))]
        if not selected:
            self.state = RemediatorState.IDLE
            return RemediationOutcome(state=self.state)

        self.state = RemediatorState.CONFIRMING
        total = sum(f.reclaimable_bytes for f in selected)
        if not self.prompter.confirm(f"Delete {len(selected)} item(s) ({format_bytes(total)})?", default=False):
            self.state = RemediatorState.IDLE
            return RemediationOutcome(state=self.state)

        remember = False
        learnable = [f.learn_key for f in selected if f.learn_key]
        if self.preferences is not None and learnable:
            self.state = RemediatorState.REMEMBERING
            remember = self.prompter.confirm("Remember these choices for future cleanups?", default=True)

        outcome = self._execute(selected)

        if remember:
            # Only fixes that succeeded become approvals
            self._learn({f.learn_key for f in outcome.fixed if f.learn_key}, outcome)

        self.state = RemediatorState.DONE
        outcome.state = self.state
        return outcome

    def run_unattended(self, findings: List[Finding]) -> RemediationOutcome:
        """Execute pre-approved autofixable findings without prompting."""
        approved = [f for f in findings if f.autofixable and f.pre_approved]
        if not approved:
            self.state = RemediatorState.IDLE
            return RemediationOutcome(state=self.state)

        outcome = self._execute(approved)
        self.state = RemediatorState.DONE
        outcome.state = self.state
        return outcome

    def _execute(self, selected: List[Finding]) -> RemediationOutcome:
        self.state = RemediatorState.EXECUTING
        outcome = RemediationOutcome(state=self.state)

        for finding in selected:
            try:
                result = finding.remediation.run()
            except Exception as e:
                failure = RemediationFailure(
                    finding_id=finding.id,
                    category=finding.category,
                    message=str(e),
                    exit_code=getattr(e, "exit_code", None),
                    output=getattr(e, "output", "") or "",
                )
                outcome.failures.append(failure)
                logger.warning("Remediation %s failed: %s", finding.id, e)
                safe_print(f"  {self.symbols.check_fail} {finding.category}: {e}")
                continue

            outcome.fixed.append(finding)
            outcome.freed_bytes += finding.reclaimable_bytes
            safe_print(f"  {self.symbols.check_pass} {finding.category}: {finding.remediation.summary}")
            output = getattr(result, "output", "")
            if output:
                for line in output.strip().splitlines()[-OUTPUT_TAIL_LINES:]:
                    safe_print(f"    {line}")

        return outcome

    def _learn(self, keys, outcome: RemediationOutcome):
        if not keys:
            return
        try:
            outcome.remembered = self.preferences.remember(keys)
        except PreferenceStoreError as e:
            outcome.store_error = str(e)
            logger.warning("Could not save preferences: %s", e)
