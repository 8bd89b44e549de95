# ============================================================================
# FILE: src/crfd_hotspots/detection/threshold.py
# ============================================================================
import numpy as np
import logging
from typing import Dict, Optional

from ..errors import ThresholdNotFoundError
from .types import SmoothedCurve, Threshold

logger = logging.getLogger(__name__)

# Slope of the 45 degree tangent
TANGENT_SLOPE = 1.0


def local_slopes(curve: SmoothedCurve) -> np.ndarray:
    """Centered finite-difference slope at every grid point.

    The first and last grid points have no two-sided neighbourhood and
    are reported as NaN.
    """
    x = np.asarray(curve.x, dtype=float)
    y = np.asarray(curve.y, dtype=float)

    slopes = np.full(len(x), np.nan)
    if len(x) >= 3:
        slopes[1:-1] = (y[2:] - y[:-2]) / (x[2:] - x[:-2])
    return slopes


class TangentThresholdFinder:
    """Locate the first grid point where the smoothed CRFD reaches unit slope."""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}

    def find(self, curve: SmoothedCurve) -> Threshold:
        """Scan the grid in its own order (1 down to 0) and stop at the first hit."""
        n_grid = len(curve.x)
        if n_grid < 4:
            raise ThresholdNotFoundError(
                "Evaluation grid too short to scan",
                {'grid_points': n_grid}
            )

        slopes = local_slopes(curve)

        # The first two grid points and the last one are not scanned
        for position in range(2, n_grid - 1):
            if slopes[position] >= TANGENT_SLOPE:
                threshold = Threshold(
                    x_star=float(curve.x[position]),
                    y_star=float(curve.y[position]),
                    position=position,
                    slope=float(slopes[position])
                )
                logger.info(f"🎯 Tangent point at x*={threshold.x_star:.4f}, "
                            f"y*={threshold.y_star:.4f} (slope {threshold.slope:.3f})")
                return threshold

        scanned = slopes[2:n_grid - 1]
        max_slope = float(np.nanmax(scanned)) if np.any(np.isfinite(scanned)) else float('nan')
        raise ThresholdNotFoundError(
            "Smoothed curve never reaches the tangent slope",
            {'target_slope': TANGENT_SLOPE, 'max_slope': round(max_slope, 6),
             'grid_points': n_grid, 'span': curve.span}
        )
