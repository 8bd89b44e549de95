# ============================================================================
# FILE: src/crfd_hotspots/errors.py
# ============================================================================
"""Exceptions raised by the CRFD hotspot pipeline."""

from typing import Any, Dict, Optional


class HotspotDetectionError(Exception):
    """Base error for a failed hotspot detection run.

    Every error records the pipeline ``stage`` that raised it and a
    ``context`` dict with the values needed to diagnose the failure.
    """

    stage = "pipeline"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return f"[{self.stage}] {self.message}"
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"[{self.stage}] {self.message} ({details})"


class InvalidInputError(HotspotDetectionError, ValueError):
    """Observation table is malformed (missing columns, non-finite values)."""

    stage = "input"


class EmptyInputError(HotspotDetectionError):
    """Observation collection has zero elements."""

    stage = "crfd_transform"


class DegenerateInputError(HotspotDetectionError):
    """Maximum observed value is not strictly positive."""

    stage = "crfd_transform"


class SmoothingFailureError(HotspotDetectionError):
    """No admissible smoothing span could be fitted."""

    stage = "curve_smoother"


class ThresholdNotFoundError(HotspotDetectionError):
    """No grid point of the smoothed curve reaches the tangent slope."""

    stage = "threshold_finder"
