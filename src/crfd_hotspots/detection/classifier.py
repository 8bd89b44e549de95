# ============================================================================
# FILE: src/crfd_hotspots/detection/classifier.py
# ============================================================================
import pandas as pd
import logging

from .types import Threshold

logger = logging.getLogger(__name__)


def classify_hotspots(observations: pd.DataFrame, crfd: pd.DataFrame,
                      threshold: Threshold) -> pd.DataFrame:
    """Flag every observation whose normalized value reaches x_star."""
    result = observations.copy()
    result['x'] = crfd['x']
    result['y'] = crfd['y']
    result['is_hotspot'] = result['x'] >= threshold.x_star

    n_hotspots = int(result['is_hotspot'].sum())
    logger.info(f"Classified {n_hotspots} of {len(result)} observations as hotspots")

    return result
