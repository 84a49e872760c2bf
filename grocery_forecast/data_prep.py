"""
Data Preparation Module

Builds the rolling-origin train/test partitions (oj_train, oj_test) from the
raw OJ sales data and stores them in the input artifact.
"""

import pandas as pd
from pathlib import Path
from typing import List, Optional, Tuple, Union

from config import DATA_CONFIG, SPLIT_CONFIG, SERIES_CONFIG
from grocery_forecast.data_generator import generate_sales_data
from grocery_forecast.persistence import artifact_path, save_objects

REQUIRED_COLUMNS = ['store', 'brand', 'week', 'logmove']


def load_raw_sales(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load the raw OJ sales file

    Args:
        path: CSV file with at least store, brand, week, logmove

    Returns:
        DataFrame sorted by store, brand, week
    """
    df = pd.read_csv(path)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns {missing}")

    return df.sort_values(['store', 'brand', 'week']).reset_index(drop=True)


def split_weeks(first_week: int,
                last_week: int,
                n_splits: int,
                horizon: int,
                gap: int) -> List[Tuple[int, int, int]]:
    """
    Week boundaries of the rolling-origin splits

    Split k tests the `horizon` weeks ending at
    last_week - (n_splits - 1 - k) * horizon and trains on first_week up to
    `gap` weeks before the test start.

    Args:
        first_week: First training week
        last_week: Last test week of the final split
        n_splits: Number of splits
        horizon: Test weeks per split
        gap: Weeks from training end to test start

    Returns:
        List of (train_end, test_start, test_end)
    """
    if n_splits < 1:
        raise ValueError(f"n_splits must be positive, got {n_splits}")
    if horizon < 1:
        raise ValueError(f"horizon must be positive, got {horizon}")
    if gap < 1:
        raise ValueError(f"gap must be at least 1, got {gap}")

    bounds = []
    for k in range(n_splits):
        test_end = last_week - (n_splits - 1 - k) * horizon
        test_start = test_end - horizon + 1
        train_end = test_start - gap
        if train_end < first_week:
            raise ValueError(
                f"split {k} has no training weeks: train would end at {train_end}, "
                f"before first_week {first_week}"
            )
        bounds.append((train_end, test_start, test_end))

    return bounds


def make_splits(df: pd.DataFrame,
                first_week: Optional[int] = None,
                last_week: Optional[int] = None,
                n_splits: Optional[int] = None,
                horizon: Optional[int] = None,
                gap: Optional[int] = None,
                index_col: Optional[str] = None) -> Tuple[List[pd.DataFrame], List[pd.DataFrame]]:
    """
    Split sales data into rolling-origin train/test partitions

    Args:
        df: Store x brand x week data
        first_week, last_week, n_splits, horizon, gap: Split parameters.
            If None, uses config SPLIT_CONFIG
        index_col: Week column. If None, uses config SERIES_CONFIG

    Returns:
        (train partitions, test partitions), same length and order
    """
    first_week = SPLIT_CONFIG['first_week'] if first_week is None else first_week
    last_week = SPLIT_CONFIG['last_week'] if last_week is None else last_week
    n_splits = SPLIT_CONFIG['n_splits'] if n_splits is None else n_splits
    horizon = SPLIT_CONFIG['horizon'] if horizon is None else horizon
    gap = SPLIT_CONFIG['gap'] if gap is None else gap
    index_col = index_col or SERIES_CONFIG['index_col']

    train_parts = []
    test_parts = []

    for train_end, test_start, test_end in split_weeks(first_week, last_week, n_splits, horizon, gap):
        weeks = df[index_col]
        train_parts.append(df[(weeks >= first_week) & (weeks <= train_end)].reset_index(drop=True))
        test_parts.append(df[(weeks >= test_start) & (weeks <= test_end)].reset_index(drop=True))

    return train_parts, test_parts


def prepare_data(data_root: Optional[Union[str, Path]] = None,
                 use_synthetic: Optional[bool] = None) -> Tuple[List[pd.DataFrame], List[pd.DataFrame]]:
    """
    Build and save the oj_train / oj_test partitions

    Reads the raw OJ file from <data_root>/<example>/<raw_file>; synthetic
    data is generated when requested or when the raw file does not exist.

    Args:
        data_root: Root directory. If None, uses config DATA_CONFIG['data_root']
        use_synthetic: Force synthetic data. If None, uses config DATA_CONFIG

    Returns:
        (oj_train, oj_test)
    """
    print("="*60)
    print("PREPARING TRAIN/TEST PARTITIONS")
    print("="*60)

    example = DATA_CONFIG['example']
    raw_path = artifact_path(example, DATA_CONFIG['raw_file'], data_root)

    if use_synthetic is None:
        use_synthetic = DATA_CONFIG['generate_new_data']

    if not use_synthetic and raw_path.exists():
        print(f"\nLoading raw sales from: {raw_path}")
        df = load_raw_sales(raw_path)
    else:
        if not use_synthetic:
            print(f"\nRaw sales not found at {raw_path}, using synthetic data")
        df = generate_sales_data(
            stores=DATA_CONFIG['stores'],
            brands=DATA_CONFIG['brands'],
            first_week=DATA_CONFIG['first_week'],
            last_week=DATA_CONFIG['last_week'],
            missing_rate=DATA_CONFIG['missing_rate'],
            seed=DATA_CONFIG['seed']
        )

    oj_train, oj_test = make_splits(df)

    print(f"\n  Splits: {len(oj_train)}")
    week = SERIES_CONFIG['index_col']
    for i, (train, test) in enumerate(zip(oj_train, oj_test)):
        print(f"  Split {i + 1}: train weeks {train[week].min()}-{train[week].max()} "
              f"({len(train):,} rows), test weeks {test[week].min()}-{test[week].max()} "
              f"({len(test):,} rows)")

    save_objects({'oj_train': oj_train, 'oj_test': oj_test}, example, DATA_CONFIG['data_file'], data_root)

    return oj_train, oj_test
