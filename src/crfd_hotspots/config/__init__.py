
# ============================================================================
# FILE: src/crfd_hotspots/config/__init__.py
# ============================================================================
"""Configuration and logging setup."""

from .logging_config import setup_logging
from .settings import (
    DEFAULT_DETECTION,
    data_params,
    detection_params,
    load_config,
    validate_config,
)

__all__ = [
    'setup_logging',
    'DEFAULT_DETECTION',
    'data_params',
    'detection_params',
    'load_config',
    'validate_config'
]
