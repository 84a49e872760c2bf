"""
Training Module

Partition-level fitting entry points run inside the worker pool:
- fit_basic_modelset: mean, naive, drift and arima for every group
- fit_ets_modelset: gap filling from the basic model set, then ETS

Both read their defaults from config.py and are module-level functions so
they can be shipped to worker processes.
"""

import pandas as pd
from typing import Dict, Iterable, Optional

from config import BASIC_MODELS, ETS_MODELS, IMPUTATION_CONFIG, SERIES_CONFIG
from grocery_forecast.exceptions import MissingModelSetError
from grocery_forecast.imputation import interpolate_partition
from grocery_forecast.modelset import ModelSet, fit_modelset


def _series_config(series_config: Optional[Dict]) -> Dict:
    config = dict(SERIES_CONFIG)
    config.update(series_config or {})
    return config


def fit_basic_modelset(df: pd.DataFrame,
                       model_specs: Optional[Dict[str, Dict]] = None,
                       series_config: Optional[Dict] = None) -> ModelSet:
    """
    Fit the basic models to one training partition

    Args:
        df: Training partition
        model_specs: Model name -> specification. If None, uses config BASIC_MODELS
        series_config: Overrides for config SERIES_CONFIG

    Returns:
        Complete ModelSet
    """
    config = _series_config(series_config)

    return fit_modelset(
        df,
        model_specs if model_specs is not None else BASIC_MODELS,
        key_cols=config['key_cols'],
        index_col=config['index_col'],
        target_col=config['target_col'],
        min_observations=config['min_observations']
    )


def fit_ets_modelset(df: pd.DataFrame,
                     basic_modelset: Optional[ModelSet],
                     model_specs: Optional[Dict[str, Dict]] = None,
                     exclude_models: Optional[Iterable[str]] = None,
                     series_config: Optional[Dict] = None) -> ModelSet:
    """
    Fill gaps with the basic model set, then fit ETS to one training partition

    Args:
        df: Training partition
        basic_modelset: Basic model set fitted on the same partition
        model_specs: Model name -> specification. If None, uses config ETS_MODELS
        exclude_models: Basic models not used for imputation.
            If None, uses config IMPUTATION_CONFIG
        series_config: Overrides for config SERIES_CONFIG

    Returns:
        Complete ModelSet

    Raises:
        MissingModelSetError: If the basic model set does not exist
    """
    if basic_modelset is None:
        raise MissingModelSetError("ETS fitting needs the basic model set of the same partition")

    if exclude_models is None:
        exclude_models = IMPUTATION_CONFIG['exclude_models']

    config = _series_config(series_config)
    complete_df = interpolate_partition(df, basic_modelset, exclude_models)

    return fit_modelset(
        complete_df,
        model_specs if model_specs is not None else ETS_MODELS,
        key_cols=config['key_cols'],
        index_col=config['index_col'],
        target_col=config['target_col'],
        min_observations=config['min_observations']
    )
