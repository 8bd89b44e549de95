
# ============================================================================
# FILE: src/crfd_hotspots/detection/hotspot_identifier.py
# ============================================================================
import numpy as np
import pandas as pd
import logging
from typing import Dict, Optional

from .threshold import local_slopes
from .types import HotspotDetectionResult, SmoothedCurve

logger = logging.getLogger(__name__)


def curve_frame(curve: SmoothedCurve) -> pd.DataFrame:
    """Smoothed curve samples with their local slopes, in grid order."""
    return pd.DataFrame({
        'x': curve.x,
        'y': curve.y,
        'slope': local_slopes(curve)
    })


class HotspotIdentifier:
    """Summarize the hotspot members of a detection result."""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}

    def summarize(self, result: HotspotDetectionResult) -> Dict:
        """Counts, extent and threshold information for one detection run."""
        observations = result.observations
        hotspots = result.hotspots

        summary = {
            'n_observations': int(len(observations)),
            'n_hotspots': int(len(hotspots)),
            'hotspot_fraction': float(len(hotspots) / len(observations)),
            'x_star': result.threshold.x_star,
            'y_star': result.threshold.y_star,
            'tangent_slope': result.threshold.slope,
            'value_threshold': float(result.value_threshold),
            'max_value': result.max_value,
            'span': result.curve.span,
            'criterion': result.curve.criterion,
            'criterion_value': result.curve.criterion_value,
        }

        if len(hotspots) > 0:
            lats = hotspots['latitude'].to_numpy(dtype=float)
            lons = hotspots['longitude'].to_numpy(dtype=float)
            values = hotspots['value'].to_numpy(dtype=float)

            summary.update({
                'center_lat': float(np.mean(lats)),
                'center_lon': float(np.mean(lons)),
                'lat_extent': float(np.max(lats) - np.min(lats)),
                'lon_extent': float(np.max(lons) - np.min(lons)),
                'min_hotspot_value': float(np.min(values)),
                'mean_hotspot_value': float(np.mean(values)),
                'total_hotspot_value': float(np.sum(values)),
                'share_of_total_value': float(np.sum(values) / np.sum(observations['value']))
                if np.sum(observations['value']) > 0 else float('nan')
            })

        logger.info(f"Hotspot summary: {summary['n_hotspots']} of {summary['n_observations']} "
                    f"observations ({summary['hotspot_fraction'] * 100:.1f}%)")
        return summary
