"""
Evaluation Module

Evaluation of forecast tables on the original sales scale:
- MAPE (Mean Absolute Percentage Error)
- MAE (Mean Absolute Error)
- RMSE (Root Mean Square Error)
- Bias
"""

import pandas as pd
import numpy as np
from typing import Dict, List, Optional


def calculate_mape(actual: np.ndarray, predicted: np.ndarray, epsilon: float = 1e-10) -> float:
    """
    Calculate Mean Absolute Percentage Error

    Args:
        actual: Actual values
        predicted: Predicted values
        epsilon: Small value to avoid division by zero

    Returns:
        MAPE percentage
    """
    # Remove zero actuals to avoid division by zero
    mask = np.abs(actual) > epsilon
    if mask.sum() == 0:
        return np.nan

    return np.mean(np.abs((actual[mask] - predicted[mask]) / actual[mask])) * 100


def calculate_mae(actual: np.ndarray, predicted: np.ndarray) -> float:
    """Calculate Mean Absolute Error"""
    return np.mean(np.abs(actual - predicted))


def calculate_rmse(actual: np.ndarray, predicted: np.ndarray) -> float:
    """Calculate Root Mean Square Error"""
    return np.sqrt(np.mean((actual - predicted)**2))


def calculate_bias(actual: np.ndarray, predicted: np.ndarray) -> float:
    """
    Calculate bias (tendency to over/under forecast)

    Positive: Over-forecasting
    Negative: Under-forecasting

    Args:
        actual: Actual values
        predicted: Predicted values

    Returns:
        Bias percentage
    """
    total_actual = np.sum(actual)
    if total_actual == 0:
        return np.nan

    return (np.sum(predicted) - total_actual) / total_actual * 100


def evaluate_forecast(actual: np.ndarray, predicted: np.ndarray) -> Dict[str, float]:
    """
    Accuracy metrics for one forecast column

    Args:
        actual: Actual values
        predicted: Predicted values

    Returns:
        Dictionary of metrics
    """
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)

    return {
        'n_samples': len(actual),
        'MAPE': round(calculate_mape(actual, predicted), 2),
        'MAE': round(calculate_mae(actual, predicted), 2),
        'RMSE': round(calculate_rmse(actual, predicted), 2),
        'Bias%': round(calculate_bias(actual, predicted), 2),
    }


def back_transform(fcast_df: pd.DataFrame, n_id_cols: int = 3) -> pd.DataFrame:
    """
    Undo the log transform of every value column

    Args:
        fcast_df: Forecast table; the first `n_id_cols` columns identify a row
        n_id_cols: Number of identifying columns

    Returns:
        Copy with exp() applied to every column after the identifying ones
    """
    if n_id_cols < 0 or n_id_cols >= fcast_df.shape[1]:
        raise ValueError(f"n_id_cols={n_id_cols} leaves no value columns in {list(fcast_df.columns)}")

    df = fcast_df.copy()
    value_cols = list(df.columns[n_id_cols:])
    df[value_cols] = np.exp(df[value_cols].astype(float))
    return df


def evaluate_forecasts(fcast_df: pd.DataFrame,
                       n_id_cols: int = 3,
                       response_col: Optional[str] = None,
                       by_group: bool = False,
                       verbose: bool = True) -> pd.DataFrame:
    """
    Evaluate a combined forecast table

    The table holds identifying columns (e.g. store, brand, week), the log
    response and one log forecast column per model. All value columns are
    exponentiated before the metrics are computed.

    Args:
        fcast_df: Forecast table, possibly concatenated across partitions
        n_id_cols: Number of identifying columns
        response_col: Response column (default: first column after the identifiers)
        by_group: One row per model x group instead of one row per model
        verbose: Print the summary table

    Returns:
        DataFrame with metrics by model (and group)
    """
    df = back_transform(fcast_df, n_id_cols)

    id_cols = list(df.columns[:n_id_cols])
    value_cols = list(df.columns[n_id_cols:])
    if response_col is None:
        response_col = value_cols[0]
    model_cols = [c for c in value_cols if c != response_col]

    if not model_cols:
        raise ValueError(f"no forecast columns besides response '{response_col}'")

    # Identifiers other than the time index define a group
    group_cols: List[str] = id_cols[:-1] if by_group else []

    results = []
    for model in model_cols:
        if group_cols:
            for key, group_df in df.groupby(group_cols, sort=True):
                key = key if isinstance(key, tuple) else (key,)
                record = dict(zip(group_cols, key))
                record['model'] = model
                record.update(evaluate_forecast(group_df[response_col].values, group_df[model].values))
                results.append(record)
        else:
            record = {'model': model}
            record.update(evaluate_forecast(df[response_col].values, df[model].values))
            results.append(record)

    results_df = pd.DataFrame(results)

    if verbose:
        print("="*60)
        print("FORECAST EVALUATION" + (" BY GROUP" if group_cols else ""))
        print("="*60)
        print(f"  Rows: {len(df):,}, response: {response_col}, models: {model_cols}")
        print()
        print(results_df.to_string(index=False))

    return results_df
