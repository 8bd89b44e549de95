# ============================================================================
# FILE: src/crfd_hotspots/detection/crfd.py
# ============================================================================
import numpy as np
import pandas as pd
import logging

from ..errors import DegenerateInputError, EmptyInputError, InvalidInputError

logger = logging.getLogger(__name__)


def crfd_transform(observations: pd.DataFrame) -> pd.DataFrame:
    """Build the cumulative relative frequency distribution of the values.

    ``x`` is each value divided by the maximum value, ``y`` the fraction of
    observations whose ``x`` is strictly smaller. The returned frame shares
    the index of ``observations`` so results can be joined back.
    """
    if len(observations) == 0:
        raise EmptyInputError("Observation collection is empty", {'n_observations': 0})

    values = observations['value'].to_numpy(dtype=float)
    non_finite = int(np.sum(~np.isfinite(values)))
    if non_finite:
        raise InvalidInputError(
            f"{non_finite} non-finite entries in column value",
            {'n_non_finite': non_finite, 'n_observations': len(values)}
        )

    max_value = float(np.max(values))

    if not max_value > 0:
        raise DegenerateInputError(
            "Maximum value must be strictly positive to normalise",
            {'max_value': max_value, 'n_observations': len(values)}
        )

    x = values / max_value
    y = crfd_rank(x)

    logger.debug(f"CRFD transform: n={len(x)}, max_value={max_value:.4g}, "
                 f"distinct x={len(np.unique(x))}")

    return pd.DataFrame({'x': x, 'y': y}, index=observations.index)


def crfd_rank(x: np.ndarray) -> np.ndarray:
    """Fraction of entries strictly less than each entry, via sorting."""
    x = np.asarray(x, dtype=float)
    sorted_x = np.sort(x)
    # side='left' counts only the strictly smaller entries, ties add nothing
    return np.searchsorted(sorted_x, x, side='left') / len(x)


def crfd_rank_naive(x: np.ndarray) -> np.ndarray:
    """Pairwise strict-less-than count, O(n^2). Reference for crfd_rank."""
    x = np.asarray(x, dtype=float)
    counts = np.array([np.sum(x < value) for value in x], dtype=float)
    return counts / len(x)
