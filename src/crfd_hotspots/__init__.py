
# ============================================================================
# FILE: src/crfd_hotspots/__init__.py
# ============================================================================
"""
CRFD Hotspot Detection

Identify hotspots of a spatially distributed variable with the cumulative
relative frequency distribution method of Bartolino et al. (2011).
"""

__version__ = "0.1.0"

from .detection.hotspot_detector import CRFDHotspotDetector
from .errors import (
    DegenerateInputError,
    EmptyInputError,
    HotspotDetectionError,
    InvalidInputError,
    SmoothingFailureError,
    ThresholdNotFoundError,
)

__all__ = [
    'CRFDHotspotDetector',
    'DegenerateInputError',
    'EmptyInputError',
    'HotspotDetectionError',
    'InvalidInputError',
    'SmoothingFailureError',
    'ThresholdNotFoundError'
]
