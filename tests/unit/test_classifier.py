from crfd_hotspots.detection.classifier import classify_hotspots
from crfd_hotspots.detection.crfd import crfd_transform
from crfd_hotspots.detection.types import Threshold


def make_threshold(x_star):
    return Threshold(x_star=x_star, y_star=0.5, position=10, slope=1.2)


def test_hotspots_are_exactly_those_at_or_above_x_star(observation_factory):
    observations = observation_factory([1, 5, 10, 20, 40, 50])
    crfd = crfd_transform(observations)
    result = classify_hotspots(observations, crfd, make_threshold(0.4))

    expected = set(crfd.index[crfd['x'] >= 0.4])
    assert set(result.index[result['is_hotspot']]) == expected
    assert result.loc[3, 'is_hotspot']  # x == 0.4 exactly is included
    assert len(result) == len(observations)


def test_reclassifying_is_idempotent(observation_factory):
    observations = observation_factory([2, 4, 8, 16, 32])
    crfd = crfd_transform(observations)
    threshold = make_threshold(0.3)

    first = classify_hotspots(observations, crfd, threshold)
    second = classify_hotspots(first, first, threshold)
    assert second['is_hotspot'].tolist() == first['is_hotspot'].tolist()


def test_inputs_are_not_modified(observation_factory):
    observations = observation_factory([1, 2, 3])
    crfd = crfd_transform(observations)
    before = observations.copy()

    classify_hotspots(observations, crfd, make_threshold(0.5))
    assert list(observations.columns) == ['longitude', 'latitude', 'value']
    assert observations.equals(before)


def test_maximum_always_classified(observation_factory):
    observations = observation_factory([3, 9, 1])
    result = classify_hotspots(observations, crfd_transform(observations), make_threshold(1.0))
    assert result['is_hotspot'].tolist() == [False, True, False]
