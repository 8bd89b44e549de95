import logging

import numpy as np
import pandas as pd
import pytest

from crfd_hotspots.config import logging_config


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    root = logging.getLogger()
    while logging_config._installed_handlers:
        handler = logging_config._installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()


def make_observations(values, seed=0):
    rng = np.random.default_rng(seed)
    n = len(values)
    return pd.DataFrame({
        'longitude': rng.uniform(-10.0, 10.0, n),
        'latitude': rng.uniform(35.0, 45.0, n),
        'value': np.asarray(values, dtype=float),
    })


@pytest.fixture()
def outlier_observations():
    return make_observations([1, 2, 3, 4, 100])


@pytest.fixture()
def uniform_observations():
    return make_observations([5.0] * 10)


@pytest.fixture()
def skewed_observations():
    """Exponential background plus a patch of 15 high values at the end."""
    rng = np.random.default_rng(42)
    background = rng.exponential(1.0, 300)
    patch = rng.uniform(30.0, 40.0, 15)
    return make_observations(np.concatenate([background, patch]), seed=1)


@pytest.fixture()
def observation_factory():
    return make_observations
