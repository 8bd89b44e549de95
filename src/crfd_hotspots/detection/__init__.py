
# ============================================================================
# FILE: src/crfd_hotspots/detection/__init__.py
# ============================================================================
"""Detection modules for CRFD hotspots."""

from .classifier import classify_hotspots
from .crfd import crfd_transform
from .hotspot_detector import CRFDHotspotDetector
from .hotspot_identifier import HotspotIdentifier
from .smoother import AdaptiveCurveSmoother
from .threshold import TangentThresholdFinder

__all__ = [
    'classify_hotspots',
    'crfd_transform',
    'CRFDHotspotDetector',
    'HotspotIdentifier',
    'AdaptiveCurveSmoother',
    'TangentThresholdFinder'
]
