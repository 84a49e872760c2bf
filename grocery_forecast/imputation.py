"""
Imputation Module

Fills missing weeks of a training partition with point predictions from an
already fitted model set, so that models needing complete series (ETS) can be
fitted afterwards.
"""

import pandas as pd
import numpy as np
from typing import Iterable, List, Optional

from grocery_forecast.exceptions import MissingModelSetError
from grocery_forecast.modelset import ModelSet, prepare_series


def imputation_sources(modelset: ModelSet, exclude_models: Optional[Iterable[str]] = None) -> List[str]:
    """
    Model names used as imputation source

    Args:
        modelset: Fitted model set
        exclude_models: Model names not to use

    Returns:
        Remaining model names, in model set order

    Raises:
        MissingModelSetError: If no model is left
    """
    excluded = set(exclude_models or [])
    sources = [name for name in modelset.model_names if name not in excluded]

    if not sources:
        raise MissingModelSetError(
            f"no imputation source left: model set has {modelset.model_names}, "
            f"excluded {sorted(excluded)}"
        )

    return sources


def interpolate_partition(df: pd.DataFrame,
                          modelset: Optional[ModelSet],
                          exclude_models: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Fill the gaps of every group with model predictions

    Every group is extended to a row per period between its first and last
    observation. Missing targets are replaced by the in-sample prediction of
    the source models (averaged when there are several); observed values are
    left untouched. Other columns of inserted rows are NaN.

    Args:
        df: Training partition
        modelset: Model set fitted on this same partition
        exclude_models: Models not used as imputation source

    Returns:
        Gap-free partition sorted by group and period

    Raises:
        MissingModelSetError: If the model set is absent or lacks a group
    """
    if modelset is None:
        raise MissingModelSetError("a fitted model set is required before imputation")

    sources = imputation_sources(modelset, exclude_models)
    key_cols = modelset.key_cols
    index_col = modelset.index_col
    target_col = modelset.target_col

    filled_groups = []
    for key, group_df in df.groupby(key_cols, sort=True):
        group = key if isinstance(key, tuple) else (key,)

        if group not in modelset:
            raise MissingModelSetError(f"no fitted models for group {group}", group=group)

        periods, values = prepare_series(group_df, index_col, target_col)
        source_models = [modelset.get(group, name) for name in sources]

        for model in source_models:
            if model.first_period != periods[0] or model.last_period != periods[-1]:
                raise ValueError(
                    f"model '{model.name}' of group {group} covers periods "
                    f"{model.first_period}-{model.last_period}, partition has {periods[0]}-{periods[-1]}"
                )

        predictions = np.mean([m.fitted_values() for m in source_models], axis=0)
        missing = np.isnan(values)

        filled = group_df.set_index(index_col).sort_index().reindex(periods)
        filled.index.name = index_col
        filled[target_col] = np.where(missing, predictions, values)
        for col, value in zip(key_cols, group):
            filled[col] = value

        filled_groups.append(filled.reset_index())

    if not filled_groups:
        raise ValueError("cannot interpolate an empty partition")

    result = pd.concat(filled_groups, ignore_index=True)
    return result[list(df.columns)]
