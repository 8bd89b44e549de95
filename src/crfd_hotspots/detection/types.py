# ============================================================================
# FILE: src/crfd_hotspots/detection/types.py
# ============================================================================
"""
Records passed between the detection stages.

- SmoothedCurve: fitted CRFD curve sampled on an explicit evaluation grid
- Threshold: tangent point found on the smoothed curve
- HotspotDetectionResult: everything one detection run produces
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class SmoothedCurve:
    x: np.ndarray  # evaluation grid, ordered from 1 down to 0
    y: np.ndarray
    span: float
    criterion: str
    criterion_value: float
    trace: float  # equivalent number of parameters of the smoother

    def __len__(self) -> int:
        return len(self.x)


@dataclass(frozen=True)
class Threshold:
    x_star: float
    y_star: float
    position: int  # index into the curve grid
    slope: float


@dataclass(frozen=True)
class HotspotDetectionResult:
    observations: pd.DataFrame  # longitude, latitude, value, x, y, is_hotspot
    crfd: pd.DataFrame
    curve: SmoothedCurve
    threshold: Threshold
    max_value: float

    @property
    def value_threshold(self) -> float:
        """Threshold expressed in the units of the input values."""
        return self.threshold.x_star * self.max_value

    @property
    def hotspots(self) -> pd.DataFrame:
        return self.observations[self.observations['is_hotspot']]
