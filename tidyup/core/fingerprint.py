"""
Fingerprint — Cheap, probabilistic content digest for duplicate detection

fingerprint = xxh64(first N bytes) + "_" + total length

Two files with the same fingerprint are *candidate* duplicates: they share
an identical prefix and an identical length. Bytes beyond the prefix are
never compared, so two files that differ only after byte N collide.
This is a deliberate speed tradeoff (no full read, no byte-compare, also
in deep mode) and results must be presented as "likely identical", never
as guaranteed-exact.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import xxhash

from .finding import SkipLog
from .walker import file_size, read_bytes


DEFAULT_PREFIX_BYTES = 10_000
DEFAULT_MIN_SIZE = 1024  # Tiny files are noise


def fingerprint_bytes(prefix: bytes, total_length: int) -> str:
    """Combine a prefix hash with the exact total length."""
    return f"{xxhash.xxh64(prefix).hexdigest()}_{total_length}"


def fingerprint_file(
    path: Path,
    prefix_bytes: int = DEFAULT_PREFIX_BYTES,
    skips: Optional[SkipLog] = None
) -> Optional[str]:
    """Fingerprint a file, or None if it cannot be read."""
    size = file_size(path, skips)
    prefix = read_bytes(path, prefix_bytes, skips)
    if prefix is None:
        return None
    return fingerprint_bytes(prefix, size)


@dataclass
class DuplicateGroup:
    """Files sharing one fingerprint."""
    fingerprint: str
    size: int
    files: List[Path] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)

    @property
    def redundant(self) -> List[Path]:
        """Every copy except the first (the one that would be kept)."""
        return self.files[1:]


def group_duplicates(
    paths: Iterable[Path],
    min_size: int = DEFAULT_MIN_SIZE,
    prefix_bytes: int = DEFAULT_PREFIX_BYTES,
    skips: Optional[SkipLog] = None
) -> List[DuplicateGroup]:
    """
    Group files by fingerprint and return groups with more than one member.

    Files smaller than `min_size` are ignored. Order of groups follows the
    first file of each group in input order.
    """
    groups: Dict[str, DuplicateGroup] = {}

    for path in paths:
        size = file_size(path, skips)
        if size < min_size:
            continue
        prefix = read_bytes(path, prefix_bytes, skips)
        if prefix is None:
            continue
        fp = fingerprint_bytes(prefix, size)
        if fp not in groups:
            groups[fp] = DuplicateGroup(fingerprint=fp, size=size)
        groups[fp].files.append(Path(path))

    return [g for g in groups.values() if g.count > 1]
