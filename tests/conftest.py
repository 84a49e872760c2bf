"""Test fixtures for the grocery forecasting pipeline."""

import numpy as np
import pandas as pd
import pytest

FIXED_MODELS = {
    'mean': {'kind': 'arima', 'order': (0, 0, 0), 'trend': 'c'},
    'naive': {'kind': 'arima', 'order': (0, 1, 0), 'trend': 'n'},
    'drift': {'kind': 'arima', 'order': (0, 1, 0), 'trend': 't'},
}

BASIC_TEST_MODELS = dict(FIXED_MODELS, arima={'kind': 'auto_arima', 'max_p': 1, 'max_d': 1, 'max_q': 1})


def make_partition(groups, weeks, seed=0, missing=()):
    """Build a store x brand partition with a random-walk logmove.

    `missing` lists (store, brand, week) rows to leave out.
    """
    rng = np.random.default_rng(seed)
    frames = []
    for store, brand in groups:
        level = 9.0 + rng.normal(0, 0.3)
        logmove = level + np.cumsum(rng.normal(0, 0.2, len(weeks)))
        frames.append(pd.DataFrame({
            'store': store,
            'brand': brand,
            'week': list(weeks),
            'logmove': logmove,
            'price': rng.uniform(0.02, 0.05, len(weeks)),
        }))
    df = pd.concat(frames, ignore_index=True)

    if missing:
        drop = df.set_index(['store', 'brand', 'week']).index.isin(list(missing))
        df = df[~drop].reset_index(drop=True)

    return df


@pytest.fixture
def fixed_models() -> dict:
    """Mean, naive and drift specifications."""
    return dict(FIXED_MODELS)


@pytest.fixture
def basic_models() -> dict:
    """Mean, naive, drift and a small auto ARIMA search."""
    return dict(BASIC_TEST_MODELS)


@pytest.fixture
def train_df() -> pd.DataFrame:
    """2 groups x 12 weeks (1-12), no missing data."""
    return make_partition([(1, 1), (1, 2)], range(1, 13), seed=1)


@pytest.fixture
def test_df() -> pd.DataFrame:
    """The 4 weeks (13-16) after train_df for the same groups."""
    return make_partition([(1, 1), (1, 2)], range(13, 17), seed=2)


@pytest.fixture
def gappy_train_df() -> pd.DataFrame:
    """2 groups x 20 weeks with interior gaps."""
    return make_partition(
        [(2, 1), (2, 3)], range(1, 21), seed=3,
        missing=[(2, 1, 5), (2, 1, 6), (2, 1, 14), (2, 3, 10)]
    )


@pytest.fixture
def gappy_test_df() -> pd.DataFrame:
    """Weeks 23-24, two weeks after gappy_train_df ends."""
    return make_partition([(2, 1), (2, 3)], range(23, 25), seed=4)


@pytest.fixture
def partition_factory():
    """Factory for custom partitions, see make_partition."""
    return make_partition
