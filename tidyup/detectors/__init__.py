"""
Detectors — Independent checks with self-registration

Each detector module exports DETECTORS, a list of Detector classes.
Adding a detector = adding a class to a module's DETECTORS (or a new
module to DETECTOR_MODULES). Order here is the order findings appear
in the report.
"""

import importlib
from typing import List

from .base import Detector, DetectorResult, ScanOptions

# Detector modules that participate in auto-registration
DETECTOR_MODULES = [
    # Reclaimable space
    'disk',
    'vcs',
    # Code hygiene
    'hygiene',
    'duplicates',
    'workspace',
]


def load_detectors(modules: List[str] = None) -> List[Detector]:
    """
    Import detector modules and instantiate their detectors in order.

    Unlike command loading, an ImportError here propagates: a missing
    detector would silently produce an incomplete report.
    """
    detectors: List[Detector] = []
    for module_name in modules or DETECTOR_MODULES:
        module = importlib.import_module(f'.{module_name}', __package__)
        for detector_cls in getattr(module, 'DETECTORS', []):
            detectors.append(detector_cls())
    return detectors


__all__ = ['Detector', 'DetectorResult', 'ScanOptions', 'DETECTOR_MODULES', 'load_detectors']
