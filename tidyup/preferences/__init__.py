"""
Preferences — User decisions that outlive a single run

Contains:
- PreferenceStore: learn keys the user marked safe to delete

Design:
- Stored in the user config file, alongside settings
- Grows only when the user opts to remember a remediation
"""

from .store import PreferenceStore, PreferenceStoreError

__all__ = [
    "PreferenceStore", "PreferenceStoreError",
]
