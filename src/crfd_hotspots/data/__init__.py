
# ============================================================================
# FILE: src/crfd_hotspots/data/__init__.py
# ============================================================================
"""Data handling modules for observation tables."""

from .loader import ObservationLoader
from .validator import ObservationValidator

__all__ = ['ObservationLoader', 'ObservationValidator']
