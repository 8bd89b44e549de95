# ============================================================================
# FILE: src/crfd_hotspots/detection/smoother.py
# ============================================================================
import numpy as np
import pandas as pd
import logging
from typing import Dict, Iterator, Optional, Tuple
from scipy.optimize import minimize_scalar

from ..config.settings import detection_params, grid_steps
from ..errors import SmoothingFailureError
from .types import SmoothedCurve

logger = logging.getLogger(__name__)

# Upper bound on neighbour weights held in memory at once
_CHUNK_CELLS = 2_000_000

# Guards floor(n * span) against span = q / n landing just below q
_SPAN_EPS = 1e-9

# Non-finite scores are clipped to this before they reach the optimizer
_SCORE_BOUND = 1e12


def evaluation_grid(resolution: float = 0.001) -> np.ndarray:
    """Regular grid over [0, 1] ordered from 1 down to 0."""
    return np.linspace(1.0, 0.0, grid_steps(resolution) + 1)


def neighbourhood_size(n: int, span: float) -> int:
    """Number of nearest points inside a local window of the given span."""
    return min(n, int(np.floor(n * span + _SPAN_EPS)))


def tricube_weights(distances: np.ndarray, bandwidth: Optional[np.ndarray] = None) -> np.ndarray:
    """Tricube weights of each row's distances scaled by the row's bandwidth.

    The bandwidth defaults to the largest distance in the row. Rows whose
    points all sit on the window edge get equal weights.
    """
    if bandwidth is None:
        bandwidth = distances.max(axis=1)
    bandwidth = np.asarray(bandwidth, dtype=float).reshape(-1, 1)

    u = np.divide(distances, bandwidth, out=np.zeros_like(distances), where=bandwidth > 0)
    weights = np.where(u < 1.0, (1.0 - u ** 3) ** 3, 0.0)

    on_edge = weights.sum(axis=1) == 0
    weights[on_edge] = 1.0
    return weights


class LocalConstantLoess:
    """Degree-0 LOESS (locally weighted moving average) with a fixed span.

    The ``q`` nearest neighbours of a point on a line form a contiguous run
    of the sorted data, so neighbourhoods are windows over ``x`` sorted once.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray):
        self.x = np.asarray(x, dtype=float)
        self.y = np.asarray(y, dtype=float)
        self.n = len(self.x)
        self._order = np.argsort(self.x, kind='mergesort')
        self._x_sorted = self.x[self._order]
        self._y_sorted = self.y[self._order]

    def window_starts(self, x_eval: np.ndarray, q: int) -> np.ndarray:
        """First sorted index of the window of ``q`` points nearest each of ``x_eval``.

        A window is moved right while the point just past its end is strictly
        closer than its first point. That test flips once along the data, so
        all rows are binary searched together.
        """
        xs = self._x_sorted
        low = np.zeros(len(x_eval), dtype=int)
        high = np.full(len(x_eval), self.n - q)

        while np.any(low < high):
            active = low < high
            mid = (low + high) // 2
            beyond = xs[np.minimum(mid + q, self.n - 1)]
            shift = active & (x_eval - xs[mid] > beyond - x_eval)
            low = np.where(shift, mid + 1, low)
            high = np.where(active & ~shift, mid, high)
        return low

    def _neighbourhoods(self, x_eval: np.ndarray, q: int) -> Iterator[Tuple[slice, np.ndarray, np.ndarray]]:
        offsets = np.arange(q)
        chunk = max(1, _CHUNK_CELLS // q)
        for start in range(0, len(x_eval), chunk):
            rows = slice(start, min(start + chunk, len(x_eval)))
            centres = x_eval[rows]
            windows = self.window_starts(centres, q)[:, None] + offsets
            distances = np.abs(self._x_sorted[windows] - centres[:, None])
            # The farthest neighbour is at one end of the window
            bandwidth = np.maximum(distances[:, 0], distances[:, -1])
            yield rows, tricube_weights(distances, bandwidth), windows

    def predict(self, x_eval: np.ndarray, q: int) -> np.ndarray:
        """Fitted values at ``x_eval`` using the ``q`` nearest points."""
        x_eval = np.asarray(x_eval, dtype=float)
        fitted = np.empty(len(x_eval))
        for rows, weights, windows in self._neighbourhoods(x_eval, q):
            fitted[rows] = (weights * self._y_sorted[windows]).sum(axis=1) / weights.sum(axis=1)
        return fitted

    def fit(self, q: int) -> Tuple[np.ndarray, float]:
        """Fitted values at the data points and the trace of the smoother matrix."""
        fitted_sorted = np.empty(self.n)
        trace = 0.0
        for rows, weights, windows in self._neighbourhoods(self._x_sorted, q):
            totals = weights.sum(axis=1)
            fitted_sorted[rows] = (weights * self._y_sorted[windows]).sum(axis=1) / totals
            # A data point is at distance 0 from itself, so its own weight is 1
            trace += float(np.sum(1.0 / totals))

        fitted = np.empty(self.n)
        fitted[self._order] = fitted_sorted
        return fitted, trace


def information_criterion(residuals: np.ndarray, trace: float, criterion: str = 'aicc') -> float:
    """AICc or GCV score of a linear smoother; ``inf`` when inadmissible.

    AICc = log(sigma2) + 1 + 2 (tr + 1) / (n - tr - 2)  (Hurvich, Simonoff & Tsai 1998)
    GCV  = n sigma2 / (n - tr)^2
    """
    n = len(residuals)
    sigma2 = float(np.sum(residuals ** 2)) / n

    if criterion == 'aicc':
        denominator = n - trace - 2
        if denominator <= 0:
            return np.inf
        if sigma2 <= 0:
            return -np.inf
        return float(np.log(sigma2) + 1 + 2 * (trace + 1) / denominator)

    if criterion == 'gcv':
        denominator = n - trace
        if denominator <= 0:
            return np.inf
        return float(n * sigma2 / denominator ** 2)

    raise ValueError(f"Unknown criterion: {criterion}")


class AdaptiveCurveSmoother:
    """Smooth the CRFD scatter with a LOESS whose span minimizes AICc or GCV."""

    def __init__(self, config: Dict):
        self.config = config
        self.detection_params = detection_params(config)
        self.criterion = self.detection_params['criterion']
        self.user_span = self.detection_params['user_span']
        self.span_range = tuple(float(s) for s in self.detection_params['span_range'])
        self.max_candidates = int(self.detection_params['max_span_candidates'])
        self.grid_resolution = float(self.detection_params['grid_resolution'])

    def smooth(self, crfd: pd.DataFrame) -> SmoothedCurve:
        """Fit the CRFD points and evaluate the curve on the regular grid."""
        x = crfd['x'].to_numpy(dtype=float)
        y = crfd['y'].to_numpy(dtype=float)
        n = len(x)

        if n == 0:
            raise SmoothingFailureError("No points to smooth", {'n': 0})

        model = LocalConstantLoess(x, y)

        if self.user_span is None:
            q, score, trace = self.select_span(model)
            logger.info(f"Selected span {q / n:.4f} ({q} of {n} points) by {self.criterion}={score:.4f}")
        else:
            q = neighbourhood_size(n, float(self.user_span))
            if q < 1:
                raise SmoothingFailureError(
                    "Span too small for the number of points",
                    {'n': n, 'user_span': self.user_span}
                )
            fitted, trace = model.fit(q)
            score = information_criterion(y - fitted, trace, self.criterion)
            logger.info(f"Using fixed span {self.user_span} ({q} of {n} points)")

        grid = evaluation_grid(self.grid_resolution)
        curve_y = model.predict(grid, q)

        if not np.all(np.isfinite(curve_y)):
            raise SmoothingFailureError(
                "Smoothed curve contains non-finite values",
                {'n': n, 'span': q / n}
            )

        grid.setflags(write=False)
        curve_y.setflags(write=False)

        return SmoothedCurve(
            x=grid,
            y=curve_y,
            span=q / n,
            criterion=self.criterion,
            criterion_value=score,
            trace=trace
        )

    def size_bounds(self, n: int) -> Tuple[int, int]:
        """Smallest and largest neighbourhood size whose span falls inside span_range."""
        low, high = self.span_range
        q_min = max(1, int(np.ceil(n * low - _SPAN_EPS)))
        q_max = min(n, int(np.floor(n * high + _SPAN_EPS)))
        return q_min, q_max

    def candidate_sizes(self, n: int) -> np.ndarray:
        """Distinct neighbourhood sizes inside span_range, thinned to max_span_candidates."""
        q_min, q_max = self.size_bounds(n)

        if q_min > q_max:
            return np.array([], dtype=int)

        sizes = np.arange(q_min, q_max + 1)
        if len(sizes) > self.max_candidates:
            sizes = np.unique(np.round(np.linspace(q_min, q_max, self.max_candidates)).astype(int))
        return sizes

    def select_span(self, model: LocalConstantLoess) -> Tuple[int, float, float]:
        """Neighbourhood size with the lowest criterion; ties go to the smallest.

        Up to max_span_candidates sizes are all scored. Beyond that a bounded
        Brent search runs over q / n, and the thinned sizes are swept only if
        it meets no admissible span.
        """
        n = model.n
        q_min, q_max = self.size_bounds(n)
        scores = {}

        def score_of(q: int) -> float:
            if q not in scores:
                fitted, trace = model.fit(q)
                scores[q] = (information_criterion(model.y - fitted, trace, self.criterion), trace)
                logger.debug(f"  span={q / n:.4f} q={q} trace={scores[q][1]:.3f} "
                             f"{self.criterion}={scores[q][0]:.5f}")
            return scores[q][0]

        if q_max - q_min + 1 > self.max_candidates:
            def objective(span: float) -> float:
                q = min(max(neighbourhood_size(n, span), q_min), q_max)
                return float(np.clip(score_of(q), -_SCORE_BOUND, _SCORE_BOUND))

            minimize_scalar(objective, bounds=(q_min / n, q_max / n), method='bounded',
                            options={'xatol': 0.5 / n})
            logger.debug(f"Bounded span search scored {len(scores)} sizes")

            if all(score == np.inf for score, _ in scores.values()):
                logger.warning("⚠️ Bounded span search found no admissible span, sweeping candidates")

        if not any(score < np.inf for score, _ in scores.values()):
            for q in self.candidate_sizes(n):
                score_of(int(q))

        admissible = [(score, q, trace) for q, (score, trace) in scores.items() if score < np.inf]
        if not admissible:
            raise SmoothingFailureError(
                "No admissible span found",
                {'n': n, 'criterion': self.criterion, 'span_range': self.span_range,
                 'candidates': len(scores)}
            )

        score, q, trace = min(admissible)
        return q, score, trace
