"""Tests for forecast generation."""

import numpy as np
import pandas as pd
import pytest

from grocery_forecast.forecast import MEAN_COL, MODEL_COL, forecast_modelset, get_forecasts
from grocery_forecast.modelset import fit_modelset
from grocery_forecast.training import fit_basic_modelset


@pytest.fixture
def basic_modelset(train_df, basic_models):
    return fit_modelset(train_df, basic_models)


class TestForecastModelset:
    """Tests for the long forecast table."""

    def test_row_count(self, basic_modelset, test_df):
        """Test 2 groups x 4 models x 4 weeks = 32 forecast rows."""
        fcast = forecast_modelset(basic_modelset, test_df)

        assert len(fcast) == 32
        assert list(fcast.columns) == ['store', 'brand', 'week', MODEL_COL, MEAN_COL]
        assert fcast.groupby(['store', 'brand', MODEL_COL]).size().eq(4).all()

    def test_naive_is_last_observation(self, basic_modelset, train_df, test_df):
        """Test that the naive forecast is flat at the last training value."""
        fcast = forecast_modelset(basic_modelset, test_df)

        for (store, brand), group_train in train_df.groupby(['store', 'brand']):
            last_value = group_train.sort_values('week')['logmove'].iloc[-1]
            naive = fcast[(fcast['store'] == store) & (fcast['brand'] == brand)
                          & (fcast[MODEL_COL] == 'naive')][MEAN_COL]
            np.testing.assert_allclose(naive, last_value, rtol=1e-6)

    def test_keys_are_subset_of_test_keys(self, basic_modelset, test_df):
        """Test that no group or week outside the test partition is produced."""
        fcast = forecast_modelset(basic_modelset, test_df)

        test_keys = set(map(tuple, test_df[['store', 'brand', 'week']].to_numpy()))
        fcast_keys = set(map(tuple, fcast[['store', 'brand', 'week']].to_numpy()))
        assert fcast_keys <= test_keys

    def test_unknown_group_is_skipped(self, basic_modelset, test_df, partition_factory):
        extra = partition_factory([(8, 8)], range(13, 17), seed=5)
        fcast = forecast_modelset(basic_modelset, pd.concat([test_df, extra], ignore_index=True))

        assert len(fcast) == 32
        assert 8 not in set(fcast['store'])

    def test_test_gaps_are_respected(self, basic_modelset, test_df):
        """Test that only the test weeks present for a group are forecast."""
        sparse = test_df[~((test_df['brand'] == 2) & test_df['week'].isin([13, 15]))]

        fcast = forecast_modelset(basic_modelset, sparse)

        group = fcast[(fcast['brand'] == 2) & (fcast[MODEL_COL] == 'drift')]
        assert list(group['week']) == [14, 16]

    def test_forecasts_are_finite(self, basic_modelset, test_df):
        fcast = forecast_modelset(basic_modelset, test_df)
        assert np.isfinite(fcast[MEAN_COL]).all()

    def test_overlapping_test_week_raises(self, basic_modelset, test_df):
        overlapping = test_df.copy()
        overlapping.loc[0, 'week'] = 12

        with pytest.raises(ValueError, match="trained up to period 12"):
            forecast_modelset(basic_modelset, overlapping)

    def test_empty_test_partition(self, basic_modelset, test_df):
        fcast = forecast_modelset(basic_modelset, test_df.iloc[0:0])

        assert fcast.empty
        assert list(fcast.columns) == ['store', 'brand', 'week', MODEL_COL, MEAN_COL]

    def test_deterministic(self, train_df, test_df, basic_models):
        """Test that refitting unchanged data reproduces the forecasts."""
        fcast1 = forecast_modelset(fit_modelset(train_df, basic_models), test_df)
        fcast2 = forecast_modelset(fit_modelset(train_df, basic_models), test_df)

        pd.testing.assert_frame_equal(fcast1, fcast2)


class TestGetForecasts:
    """Tests for the wide forecast table."""

    def test_layout(self, basic_modelset, test_df):
        """Test identifiers first, then the response, then one column per model."""
        fcast = get_forecasts(basic_modelset, test_df)

        assert list(fcast.columns) == ['store', 'brand', 'week', 'logmove', 'mean', 'naive', 'drift', 'arima']
        assert len(fcast) == 8

    def test_response_is_test_actual(self, basic_modelset, test_df):
        fcast = get_forecasts(basic_modelset, test_df)

        expected = test_df.sort_values(['store', 'brand', 'week'])['logmove'].to_numpy()
        np.testing.assert_allclose(fcast['logmove'], expected)

    def test_matches_long_table(self, basic_modelset, test_df):
        wide = get_forecasts(basic_modelset, test_df)
        long = forecast_modelset(basic_modelset, test_df)

        arima = long[long[MODEL_COL] == 'arima'].sort_values(['store', 'brand', 'week'])
        np.testing.assert_allclose(wide['arima'], arima[MEAN_COL])

    def test_empty_test_partition(self, basic_modelset, test_df):
        fcast = get_forecasts(basic_modelset, test_df.iloc[0:0])

        assert fcast.empty
        assert list(fcast.columns)[:4] == ['store', 'brand', 'week', 'logmove']

    def test_shortest_series_forecasts_sales_level(self):
        """Test that a 3-week group gets an ARIMA forecast near its level, not zero."""
        train = pd.DataFrame({'store': 1, 'brand': 1, 'week': [1, 2, 3], 'logmove': [9.1, 9.3, 9.2]})
        test = pd.DataFrame({'store': 1, 'brand': 1, 'week': [5, 6], 'logmove': [9.2, 9.0]})

        fcast = get_forecasts(fit_basic_modelset(train), test)

        assert len(fcast) == 2
        assert fcast['arima'].between(8.0, 10.5).all()
