# ============================================================================
# FILE: src/crfd_hotspots/detection/hotspot_detector.py
# ============================================================================
import numpy as np
import pandas as pd
import logging
from typing import Dict, Optional

from ..config.settings import detection_params
from ..data.validator import ObservationValidator
from ..errors import DegenerateInputError, EmptyInputError, InvalidInputError
from .classifier import classify_hotspots
from .crfd import crfd_transform
from .smoother import AdaptiveCurveSmoother
from .threshold import TangentThresholdFinder
from .types import HotspotDetectionResult

logger = logging.getLogger(__name__)


class CRFDHotspotDetector:
    """Detect hotspots with the cumulative relative frequency distribution method.

    Bartolino et al. (2011): values are normalised by their maximum, the
    cumulative relative frequency curve is smoothed with an adaptive LOESS,
    and observations beyond the first 45 degree tangent point (scanning
    from high to low values) are hotspots.
    """

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}
        self.detection_params = detection_params(self.config)
        self.validator = ObservationValidator(self.config)
        self.smoother = AdaptiveCurveSmoother(self.config)
        self.threshold_finder = TangentThresholdFinder(self.config)

    def detect_hotspots(self, observations: pd.DataFrame) -> HotspotDetectionResult:
        """Main hotspot detection pipeline."""
        logger.info("Starting CRFD hotspot detection")

        self.check_observations(observations)

        # Step 1: cumulative relative frequency distribution
        crfd = crfd_transform(observations)
        max_value = float(observations['value'].max())
        logger.info(f"CRFD built from {len(crfd)} observations (max value {max_value:.4g})")

        # Step 2: adaptive smoothing on the evaluation grid
        curve = self.smoother.smooth(crfd)
        logger.info(f"Curve smoothed on {len(curve)} grid points with span {curve.span:.4f}")

        # Step 3: 45 degree tangent threshold
        threshold = self.threshold_finder.find(curve)

        # Step 4: classification
        classified = classify_hotspots(observations, crfd, threshold)

        result = HotspotDetectionResult(
            observations=classified,
            crfd=crfd,
            curve=curve,
            threshold=threshold,
            max_value=max_value
        )

        logger.info(f"✅ Hotspot detection completed: {len(result.hotspots)} hotspot observations, "
                    f"value threshold {result.value_threshold:.4g}")
        return result

    def check_observations(self, observations: pd.DataFrame):
        """Raise the matching pipeline error when the observation table is unusable."""
        report = self.validator.validate_observations(observations)

        for warning in report['warnings']:
            logger.warning(warning)

        if report['valid']:
            stats = report['statistics']
            logger.debug(f"Value statistics: mean={stats['value_mean']:.4g}, "
                         f"std={stats['value_std']:.4g}, count={stats['count']}")
            return

        context = {'errors': report['errors']}
        if report['empty']:
            raise EmptyInputError("Observation collection is empty", {'n_observations': 0})
        if report['degenerate']:
            context['max_value'] = float(np.max(observations['value'].to_numpy(dtype=float)))
            raise DegenerateInputError("Maximum value must be strictly positive to normalise", context)
        raise InvalidInputError("Observation table failed validation", context)
