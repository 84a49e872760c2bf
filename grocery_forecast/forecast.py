"""
Forecast Generation Module

Produces forecasts of a model set over the weeks of the matching test partition:
- forecast_modelset: long table, one row per group x model x week
- get_forecasts: wide table with the test response and one column per model
"""

import pandas as pd
import numpy as np

from grocery_forecast.modelset import ModelSet

MODEL_COL = '.model'
MEAN_COL = '.mean'


def forecast_modelset(modelset: ModelSet, test_df: pd.DataFrame) -> pd.DataFrame:
    """
    Forecast every model of every group for the weeks in the test partition

    Only groups present in both the model set and the test partition are
    forecast, and only at the (group, week) pairs of the test partition.

    Args:
        modelset: Fitted model set
        test_df: Held-out partition

    Returns:
        DataFrame with key columns, index column, '.model' and '.mean'
    """
    key_cols = modelset.key_cols
    index_col = modelset.index_col
    columns = key_cols + [index_col, MODEL_COL, MEAN_COL]

    frames = []
    for key, group_df in test_df.groupby(key_cols, sort=True):
        group = key if isinstance(key, tuple) else (key,)
        if group not in modelset:
            continue

        if group_df[index_col].duplicated().any():
            raise ValueError(f"duplicate {index_col} values in test partition for group {group}")

        periods = np.sort(group_df[index_col].to_numpy(dtype=int))

        for name in modelset.model_names:
            frame = pd.DataFrame({
                index_col: periods,
                MODEL_COL: name,
                MEAN_COL: modelset.get(group, name).forecast_periods(periods),
            })
            for col, value in zip(key_cols, group):
                frame[col] = value
            frames.append(frame[columns])

    if not frames:
        return pd.DataFrame(columns=columns)

    return pd.concat(frames, ignore_index=True)


def get_forecasts(modelset: ModelSet, test_df: pd.DataFrame) -> pd.DataFrame:
    """
    Forecast table with the test response alongside every model

    Args:
        modelset: Fitted model set
        test_df: Held-out partition

    Returns:
        DataFrame: key columns, index column, target column, one column per model
    """
    key_cols = modelset.key_cols
    id_cols = key_cols + [modelset.index_col]
    target_col = modelset.target_col

    long_df = forecast_modelset(modelset, test_df)

    if long_df.empty:
        return pd.DataFrame(columns=id_cols + [target_col] + modelset.model_names)

    wide_df = long_df.pivot(index=id_cols, columns=MODEL_COL, values=MEAN_COL)
    wide_df = wide_df[modelset.model_names].reset_index()
    wide_df.columns.name = None

    actuals = test_df[id_cols + [target_col]]
    fcast_df = actuals.merge(wide_df, on=id_cols, how='inner')

    return fcast_df.sort_values(id_cols).reset_index(drop=True)
