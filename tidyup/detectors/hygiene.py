"""
Hygiene Detectors — Text-pattern checks over source and docs

Regex over file contents, never parsing. False positives are expected
and acceptable: none of these findings carry a remediation, they only
point at files worth a look.

Files that are too large, not UTF-8 or unreadable are recorded in the
SkipLog by read_text() and left out.
"""

import os
import re
from collections import Counter
from pathlib import Path
from typing import Dict, Iterator, List, Pattern, Tuple

from ..core.finding import Finding, Severity, SkipLog
from ..core.walker import read_text, relpath
from .base import Detector, ScanOptions

JS_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")
TS_EXTENSIONS = (".ts", ".tsx")
PY_EXTENSIONS = (".py",)
CODE_EXTENSIONS = JS_EXTENSIONS + TS_EXTENSIONS + PY_EXTENSIONS
DOC_EXTENSIONS = (".md",)

# Docs that are entry points by convention, never orphans
CANONICAL_DOCS = frozenset({
    "README", "CHANGELOG", "CONTRIBUTING", "CLAUDE",
    "LICENSE", "CODE_OF_CONDUCT", "SECURITY",
})

# Extension group -> (label, pattern)
RISKY_PATTERNS: Dict[Tuple[str, ...], List[Tuple[str, Pattern]]] = {
    JS_EXTENSIONS + TS_EXTENSIONS: [
        ("console.log", re.compile(r"\bconsole\.log\(")),
        ("eslint-disable", re.compile(r"eslint-disable")),
    ],
    TS_EXTENSIONS: [
        ("any type", re.compile(r":\s*any\b|\bas\s+any\b|<any>")),
        ("@ts-ignore", re.compile(r"@ts-ignore")),
    ],
    PY_EXTENSIONS: [
        ("print()", re.compile(r"^\s*print\(", re.MULTILINE)),
        ("type: ignore", re.compile(r"#\s*type:\s*ignore")),
        ("noqa", re.compile(r"#\s*noqa\b")),
    ],
}

TECH_DEBT_RE = re.compile(r"(?://|#)\s*(TODO|FIXME|HACK|XXX)\b")

MD_LINK_RE = re.compile(r"\[[^\]]*\]\(\s*([^)\s#]+\.md)(?:#[^)\s]*)?\s*\)", re.IGNORECASE)


def _text_files(
    detector: Detector,
    root: Path,
    options: ScanOptions,
    skips: SkipLog,
    extensions: Tuple[str, ...]
) -> Iterator[Tuple[Path, str]]:
    """Yield (path, text) for readable files with the given extensions."""
    walker = detector.walker(root, options, skips)
    for path in walker.files(options.settings.text_depth, extensions=extensions):
        text = read_text(path, skips, options.settings.max_text_bytes)
        if text is not None:
            yield path, text


class OutdatedTermsDetector(Detector):
    """Deprecated terminology, mapped to its replacement."""

    id = "outdated-terms"
    category = "Outdated Terms"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        terms = [
            (term, replacement, re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE))
            for term, replacement in options.settings.deprecated_terms.items()
        ]
        if not terms:
            return []

        hits: Dict[str, Dict[str, str]] = {}
        for path, text in _text_files(self, root, options, skips, CODE_EXTENSIONS + DOC_EXTENSIONS):
            for term, replacement, pattern in terms:
                if pattern.search(text):
                    hits[relpath(root, path)] = {"term": term, "replacement": replacement}
                    break

        if not hits:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"{len(hits)} file(s) use deprecated terms",
            affected_paths=list(hits),
            details={"terms": hits},
        )]


class NonCanonicalDetector(Detector):
    """Debug output, type-safety escapes and lint suppressions."""

    id = "non-canonical"
    category = "Non-Canonical Uses"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        hits: Dict[str, List[str]] = {}
        for path, text in _text_files(self, root, options, skips, CODE_EXTENSIONS):
            labels = [
                label
                for extensions, patterns in RISKY_PATTERNS.items()
                if path.name.endswith(extensions)
                for label, pattern in patterns
                if pattern.search(text)
            ]
            if labels:
                hits[relpath(root, path)] = labels

        if not hits:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"{len(hits)} file(s) with risky patterns",
            affected_paths=list(hits),
            details={"patterns": hits},
        )]


class OrphanDocsDetector(Detector):
    """
    Markdown files no other Markdown file links to.

    A link counts when its relative target, resolved against the linking
    file's directory, lands on the doc. External URLs never match.
    """

    id = "orphan-docs"
    category = "Orphan Documentation"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        docs: List[str] = []
        linked = set()
        for path, text in _text_files(self, root, options, skips, DOC_EXTENSIONS):
            rel = relpath(root, path)
            docs.append(rel)
            base = os.path.dirname(rel)
            for target in MD_LINK_RE.findall(text):
                if "://" in target:
                    continue
                if target.startswith("/"):
                    resolved = os.path.normpath(target.lstrip("/"))
                else:
                    resolved = os.path.normpath(os.path.join(base, target))
                linked.add(Path(resolved).as_posix())

        orphans = [
            d for d in docs
            if d not in linked and Path(d).stem.upper() not in CANONICAL_DOCS
        ]
        if not orphans:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.INFO,
            category=self.category,
            description=f"{len(orphans)} unlinked Markdown file(s)",
            affected_paths=orphans,
        )]


class TechDebtDetector(Detector):
    """TODO/FIXME/HACK/XXX comment markers, counted by kind."""

    id = "tech-debt"
    category = "Tech Debt Markers"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        counts: Counter = Counter()
        per_file: Dict[str, int] = {}
        for path, text in _text_files(self, root, options, skips, CODE_EXTENSIONS):
            markers = TECH_DEBT_RE.findall(text)
            if markers:
                counts.update(markers)
                per_file[relpath(root, path)] = len(markers)

        if not per_file:
            return []
        summary = ", ".join(f"{n} {kind}" for kind, n in sorted(counts.items()))
        return [Finding(
            id=self.id,
            severity=Severity.INFO,
            category=self.category,
            description=f"{summary} in {len(per_file)} file(s)",
            affected_paths=list(per_file),
            details={"counts": dict(sorted(counts.items())), "files": per_file},
        )]


def naming_styles(stem: str) -> List[str]:
    """
    Conventions a basename uses.

    Examples:
        naming_styles("userService")   -> ["upper"]
        naming_styles("user-service")  -> ["kebab"]
        naming_styles("User_service")  -> ["upper", "snake"]
    """
    stem = stem.strip("_")
    styles = []
    if any(c.isupper() for c in stem):
        styles.append("upper")
    if "-" in stem:
        styles.append("kebab")
    if "_" in stem:
        styles.append("snake")
    return styles


class NamingDetector(Detector):
    """Code file basenames mixing two or more naming conventions."""

    id = "naming-inconsistent"
    category = "Inconsistent Naming"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        walker = self.walker(root, options, skips)
        mixed: Dict[str, List[str]] = {}
        for path in walker.files(options.settings.shallow_depth, extensions=CODE_EXTENSIONS):
            stem = path.name.split(".", 1)[0]
            styles = naming_styles(stem)
            if len(styles) >= 2:
                mixed[relpath(root, path)] = styles

        if not mixed:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.INFO,
            category=self.category,
            description=f"{len(mixed)} file name(s) mix naming conventions",
            affected_paths=list(mixed),
            details={"styles": mixed},
        )]


class RogueToolsDetector(Detector):
    """Local code doing what a shared service should do."""

    id = "rogue-tools"
    category = "Rogue Local Tools"

    def detect(self, root: Path, options: ScanOptions, skips: SkipLog) -> List[Finding]:
        patterns = [
            (label, re.compile(regex, re.MULTILINE))
            for label, regex in options.settings.rogue_patterns.items()
        ]
        if not patterns:
            return []

        hits: Dict[str, List[str]] = {}
        for path, text in _text_files(self, root, options, skips, CODE_EXTENSIONS):
            labels = [label for label, pattern in patterns if pattern.search(text)]
            if labels:
                hits[relpath(root, path)] = labels

        if not hits:
            return []
        return [Finding(
            id=self.id,
            severity=Severity.WARNING,
            category=self.category,
            description=f"{len(hits)} file(s) reimplement shared services",
            affected_paths=list(hits),
            details={"patterns": hits},
        )]


DETECTORS = [
    OutdatedTermsDetector,
    NonCanonicalDetector,
    OrphanDocsDetector,
    TechDebtDetector,
    NamingDetector,
    RogueToolsDetector,
]
