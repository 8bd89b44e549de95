import numpy as np
import pytest

from crfd_hotspots.detection.smoother import evaluation_grid
from crfd_hotspots.detection.threshold import TangentThresholdFinder, local_slopes
from crfd_hotspots.detection.types import SmoothedCurve
from crfd_hotspots.errors import ThresholdNotFoundError


def make_curve(x, y):
    return SmoothedCurve(x=np.asarray(x, dtype=float), y=np.asarray(y, dtype=float),
                         span=0.5, criterion='aicc', criterion_value=0.0, trace=2.0)


def two_step_curve(grid):
    # steep (slope 2.5) around x = 0.2 and around x = 0.7, gentle elsewhere
    return np.interp(grid, [0.0, 0.19, 0.21, 0.69, 0.71, 1.0], [0.0, 0.1, 0.15, 0.3, 0.35, 0.4])


def test_first_hit_not_steepest_point():
    grid = evaluation_grid(0.01)
    threshold = TangentThresholdFinder().find(make_curve(grid, grid ** 2))
    # slope 2x is largest at the top of the grid, which is scanned first from position 2
    assert threshold.position == 2
    assert threshold.x_star == pytest.approx(0.98)
    assert threshold.y_star == pytest.approx(0.98 ** 2)


def test_kink_located_on_grid():
    grid = evaluation_grid(0.01)
    y = np.where(grid < 0.3, 2 * grid, 0.6 + 0.1 * (grid - 0.3))
    threshold = TangentThresholdFinder().find(make_curve(grid, y))
    assert threshold.x_star == pytest.approx(0.30)
    assert threshold.slope >= 1.0


def test_scan_runs_from_high_to_low_x():
    grid = evaluation_grid(0.01)
    threshold = TangentThresholdFinder().find(make_curve(grid, two_step_curve(grid)))
    assert 0.69 <= threshold.x_star <= 0.72


def test_scan_order_follows_grid_order():
    grid = evaluation_grid(0.01)[::-1]
    threshold = TangentThresholdFinder().find(make_curve(grid, two_step_curve(grid)))
    assert threshold.x_star <= 0.22


def test_threshold_properties_hold():
    grid = evaluation_grid(0.001)
    curve = make_curve(grid, two_step_curve(grid))
    threshold = TangentThresholdFinder().find(curve)
    slopes = local_slopes(curve)

    assert grid.min() <= threshold.x_star <= grid.max()
    assert slopes[threshold.position] >= 1.0
    assert not np.any(slopes[2:threshold.position] >= 1.0)


def test_flat_curve_raises_with_context():
    grid = evaluation_grid(0.001)
    with pytest.raises(ThresholdNotFoundError) as excinfo:
        TangentThresholdFinder().find(make_curve(grid, np.zeros_like(grid)))
    assert excinfo.value.context['max_slope'] == 0.0
    assert excinfo.value.stage == "threshold_finder"


def test_gentle_curve_raises():
    grid = evaluation_grid(0.001)
    with pytest.raises(ThresholdNotFoundError):
        TangentThresholdFinder().find(make_curve(grid, 0.9 * grid))


def test_excluded_positions_are_not_scanned():
    # only position 1 is steep, and positions 0, 1 and the last are skipped
    x = np.array([1.0, 0.8, 0.6, 0.4, 0.2, 0.0])
    y = np.array([3.0, 0.5, 0.5, 0.5, 0.5, 0.5])
    assert local_slopes(make_curve(x, y))[1] >= 1.0
    with pytest.raises(ThresholdNotFoundError):
        TangentThresholdFinder().find(make_curve(x, y))


def test_grid_too_short():
    with pytest.raises(ThresholdNotFoundError):
        TangentThresholdFinder().find(make_curve([1.0, 0.5, 0.0], [1.0, 0.5, 0.0]))


def test_local_slopes_endpoints_nan():
    grid = evaluation_grid(0.1)
    slopes = local_slopes(make_curve(grid, 3 * grid))
    assert np.isnan(slopes[0]) and np.isnan(slopes[-1])
    np.testing.assert_allclose(slopes[1:-1], 3.0)
