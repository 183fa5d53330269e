"""
PreferenceStore — Learned "safe to delete" decisions

A flat unique set of learn keys, persisted in the user config file:

    cleanup:
      safe_to_delete:
        - backup-files@v1
        - build-dist@v1

Read at the start of every scan (to mark findings pre-approved),
written only when the user asks to remember a remediation.

Design:
- Union-only from the remediation flow: a scan never shrinks the set
- Explicit pruning via forget()/clear() (the `prefs` command)
- Writes re-read the file first and keep every other key intact
- No locking: two tidyup processes remembering at once can lose one
  process's additions
"""

from pathlib import Path
from typing import Any, Dict, Iterable, Set

import yaml


class PreferenceStoreError(Exception):
    """Preference file exists but cannot be read or written."""


class PreferenceStore:
    """Set of approved learn keys backed by a YAML file."""

    SECTION = "cleanup"
    KEY = "safe_to_delete"

    def __init__(self, path: Path):
        """
        Args:
            path: User config file (shared with ConfigManager)
        """
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise PreferenceStoreError(f"Malformed preferences in {self.path}: {e}") from e
        except OSError as e:
            raise PreferenceStoreError(f"Cannot read {self.path}: {e.strerror or e}") from e
        if not isinstance(data, dict):
            raise PreferenceStoreError(f"{self.path} must contain a mapping")
        return data

    def _write(self, data: Dict[str, Any]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            raise PreferenceStoreError(f"Cannot write {self.path}: {e.strerror or e}") from e

    @classmethod
    def _keys_from(cls, data: Dict[str, Any]) -> Set[str]:
        section = data.get(cls.SECTION) or {}
        if not isinstance(section, dict):
            return set()
        keys = section.get(cls.KEY) or []
        if not isinstance(keys, list):
            return set()
        return {str(k) for k in keys}

    def _store(self, data: Dict[str, Any], keys: Set[str]):
        section = data.get(self.SECTION)
        if not isinstance(section, dict):
            section = {}
        section[self.KEY] = sorted(keys)
        data[self.SECTION] = section
        self._write(data)

    # =========================================================================
    # Public API
    # =========================================================================

    def load(self) -> Set[str]:
        """All approved learn keys. Missing file or key = empty set."""
        return self._keys_from(self._read())

    def is_approved(self, key: str) -> bool:
        return key in self.load()

    def remember(self, keys: Iterable[str]) -> int:
        """
        Union keys into the store.

        Returns:
            Number of keys that were not already present
        """
        new_keys = {k for k in keys if k}
        if not new_keys:
            return 0
        data = self._read()
        current = self._keys_from(data)
        added = new_keys - current
        if added:
            self._store(data, current | new_keys)
        return len(added)

    def forget(self, keys: Iterable[str]) -> int:
        """Remove keys. Returns how many were actually present."""
        data = self._read()
        current = self._keys_from(data)
        removed = current & set(keys)
        if removed:
            self._store(data, current - removed)
        return len(removed)

    def clear(self) -> int:
        """Remove every learned key. Returns how many there were."""
        data = self._read()
        current = self._keys_from(data)
        if current:
            self._store(data, set())
        return len(current)
