
# ============================================================================
# FILE: src/crfd_hotspots/data/validator.py
# ============================================================================
import numpy as np
import pandas as pd
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('longitude', 'latitude', 'value')


class ObservationValidator:
    """Validate an observation table before hotspot detection."""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}

    def validate_observations(self, df: pd.DataFrame) -> Dict:
        """Validate an observation table with longitude, latitude and value columns."""
        validation_results = {
            'valid': True,
            'empty': False,
            'degenerate': False,
            'warnings': [],
            'errors': [],
            'statistics': {}
        }

        # Check for required columns
        for column in REQUIRED_COLUMNS:
            if column not in df.columns:
                validation_results['errors'].append(f"Missing required column: {column}")
                validation_results['valid'] = False

        if not validation_results['valid']:
            return validation_results

        if len(df) == 0:
            validation_results['errors'].append("No observations found")
            validation_results['valid'] = False
            validation_results['empty'] = True
            return validation_results

        for column in REQUIRED_COLUMNS:
            try:
                data = pd.to_numeric(df[column]).to_numpy(dtype=float)
            except (TypeError, ValueError):
                validation_results['errors'].append(f"Column {column} is not numeric")
                validation_results['valid'] = False
                continue

            n_bad = int(np.sum(~np.isfinite(data)))
            if n_bad > 0:
                validation_results['errors'].append(f"{n_bad} non-finite entries in column {column}")
                validation_results['valid'] = False

        if not validation_results['valid']:
            return validation_results

        values = df['value'].to_numpy(dtype=float)

        # Check value ranges
        if np.max(values) <= 0:
            validation_results['errors'].append(
                f"Maximum value {np.max(values)} is not positive, values cannot be normalised"
            )
            validation_results['valid'] = False
            validation_results['degenerate'] = True
        if np.min(values) < 0:
            validation_results['warnings'].append("Some values are negative")
        if np.min(values) == np.max(values):
            validation_results['warnings'].append("All values are equal, no hotspot can stand out")

        lons = df['longitude'].to_numpy(dtype=float)
        lats = df['latitude'].to_numpy(dtype=float)
        if np.any(np.abs(lats) > 90) or np.any(np.abs(lons) > 360):
            validation_results['warnings'].append("Some coordinates lie outside geographic ranges")

        validation_results['statistics'] = {
            'value_mean': float(np.mean(values)),
            'value_std': float(np.std(values)),
            'value_min': float(np.min(values)),
            'value_max': float(np.max(values)),
            'value_median': float(np.median(values)),
            'count': len(values)
        }

        return validation_results
