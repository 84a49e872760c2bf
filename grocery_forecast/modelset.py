"""
Model Set Module

A model set holds, for one training partition, every fitted model of every
store x brand group: group key -> {model name -> FittedSeriesModel}.

Fitting is strict: if a single (group, model) fit fails, the whole partition
fails with ModelFitError and no model set is returned.
"""

import pandas as pd
import numpy as np
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from grocery_forecast.arima_model import fit_arima, fit_auto_arima, describe_arima
from grocery_forecast.ets_model import auto_ets_components, describe_ets, fit_auto_ets, fit_ets
from grocery_forecast.exceptions import ModelFitError


MODEL_KINDS = ('arima', 'auto_arima', 'ets', 'auto_ets')


def prepare_series(group_df: pd.DataFrame,
                   index_col: str = 'week',
                   target_col: str = 'logmove') -> Tuple[np.ndarray, np.ndarray]:
    """
    Turn one group's rows into a regular series with explicit gaps

    The series spans every period from the first to the last observed one;
    periods without a row (or with a missing target) are NaN.

    Args:
        group_df: Rows of a single group
        index_col: Integer time index column
        target_col: Target column

    Returns:
        periods, values
    """
    if group_df.empty:
        raise ValueError("cannot build a series from an empty group")

    if group_df[index_col].duplicated().any():
        duplicates = group_df.loc[group_df[index_col].duplicated(), index_col].tolist()
        raise ValueError(f"duplicate {index_col} values in group: {duplicates}")

    observed = group_df.set_index(index_col)[target_col].sort_index()
    periods = np.arange(int(observed.index.min()), int(observed.index.max()) + 1)
    values = observed.reindex(periods).to_numpy(dtype=float)

    return periods, values


def _as_key(key) -> Tuple:
    return key if isinstance(key, tuple) else (key,)


class FittedSeriesModel:
    """One fitted model for one series, with forecasting over integer periods"""

    def __init__(self,
                 name: str,
                 kind: str,
                 results,
                 first_period: int,
                 last_period: int,
                 n_obs: int,
                 params: Optional[Dict] = None):
        self.name = name
        self.kind = kind
        self.results = results
        self.first_period = int(first_period)
        self.last_period = int(last_period)
        self.n_obs = int(n_obs)
        self.params = params or {}

    @property
    def description(self) -> str:
        if self.kind in ('ets', 'auto_ets'):
            return describe_ets(self.params.get('trend'), self.params.get('seasonal'),
                                self.params.get('damped_trend', False), self.params.get('error', 'add'))
        return describe_arima(self.params['order'], self.params.get('trend'))

    def forecast(self, steps: int) -> np.ndarray:
        """
        Point forecasts for the `steps` periods after the training end

        Args:
            steps: Number of steps to forecast

        Returns:
            Forecast array
        """
        if steps < 1:
            raise ValueError(f"steps must be positive, got {steps}")
        if self.kind == 'auto_ets':
            return np.asarray(self.results.predict(h=steps)['mean'], dtype=float)
        return np.asarray(self.results.forecast(steps), dtype=float)

    def forecast_periods(self, periods: Sequence[int]) -> np.ndarray:
        """
        Point forecasts for specific future periods

        Args:
            periods: Periods after the last training period (any order, gaps allowed)

        Returns:
            Forecasts aligned with `periods`
        """
        periods = np.asarray(periods, dtype=int)
        if len(periods) == 0:
            return np.array([], dtype=float)

        if periods.min() <= self.last_period:
            raise ValueError(
                f"cannot forecast period {periods.min()}: model '{self.name}' "
                f"was trained up to period {self.last_period}"
            )

        path = self.forecast(int(periods.max()) - self.last_period)
        return path[periods - self.last_period - 1]

    def fitted_values(self) -> np.ndarray:
        """One-step-ahead in-sample predictions from first_period to last_period"""
        if self.kind == 'auto_ets':
            return np.asarray(self.results.predict_in_sample()['fitted'], dtype=float)
        if self.kind == 'ets':
            return np.asarray(self.results.fittedvalues, dtype=float)
        return np.asarray(self.results.predict(), dtype=float)

    def __repr__(self):
        return (f"FittedSeriesModel(name={self.name!r}, model={self.description!r}, "
                f"periods={self.first_period}-{self.last_period}, n_obs={self.n_obs})")


def _params_finite(kind: str, results, chosen: Dict) -> bool:
    if kind == 'auto_ets':
        return bool(np.all(np.isfinite(np.asarray(results.predict_in_sample()['fitted'], dtype=float))))
    if kind != 'ets':
        return bool(np.all(np.isfinite(np.asarray(results.params, dtype=float))))

    # Holt-Winters reports unused components as NaN
    names = ['smoothing_level', 'initial_level']
    if chosen.get('trend') is not None:
        names += ['smoothing_trend', 'initial_trend']
    return all(np.isfinite(float(results.params[n])) for n in names)


def validate_model_specs(model_specs: Dict[str, Dict]) -> None:
    """Reject empty or unknown model specifications before any fitting"""
    if not model_specs:
        raise ValueError("at least one model specification is required")

    for name, spec in model_specs.items():
        kind = spec.get('kind')
        if kind not in MODEL_KINDS:
            raise ValueError(f"model '{name}' has unknown kind {kind!r}, expected one of {MODEL_KINDS}")
        if kind == 'arima' and 'order' not in spec:
            raise ValueError(f"model '{name}' needs an 'order'")


def fit_series_model(name: str,
                     spec: Dict,
                     periods: np.ndarray,
                     values: np.ndarray,
                     group: Tuple = (),
                     min_observations: int = 3) -> FittedSeriesModel:
    """
    Fit one model specification to one series

    Args:
        name: Model name (e.g. 'naive')
        spec: Model specification with a 'kind' entry and its parameters
        periods: Regular integer periods
        values: Series values aligned with periods (NaN = missing)
        group: Group key, used in error messages
        min_observations: Minimum number of observed values

    Returns:
        FittedSeriesModel

    Raises:
        ModelFitError: If the model cannot be fitted
    """
    kind = spec['kind']
    params = {k: v for k, v in spec.items() if k != 'kind'}
    n_obs = int(np.count_nonzero(~np.isnan(values)))

    if n_obs < min_observations:
        raise ModelFitError(group, name, f"{n_obs} observations, need at least {min_observations}")

    try:
        if kind == 'arima':
            results = fit_arima(values, params['order'], params.get('trend', 'n'))
            chosen = {'order': tuple(params['order']), 'trend': params.get('trend', 'n')}
        elif kind == 'auto_arima':
            results, chosen = fit_auto_arima(values, **params)
        elif kind == 'auto_ets':
            results = fit_auto_ets(values, **params)
            chosen = auto_ets_components(results)
        else:
            results = fit_ets(values, **params)
            chosen = dict(params)
    except Exception as e:
        raise ModelFitError(group, name, str(e)) from e

    if not _params_finite(kind, results, chosen):
        raise ModelFitError(group, name, "estimated parameters are not finite")

    model = FittedSeriesModel(name, kind, results, periods[0], periods[-1], n_obs, chosen)

    if not np.isfinite(model.forecast(1)).all():
        raise ModelFitError(group, name, "forecast is not finite")

    return model


class ModelSet:
    """Fitted models for all groups of one partition"""

    def __init__(self,
                 models: Dict[Tuple, Dict[str, FittedSeriesModel]],
                 model_names: Sequence[str],
                 key_cols: Sequence[str] = ('store', 'brand'),
                 index_col: str = 'week',
                 target_col: str = 'logmove'):
        self.models = models
        self.model_names = list(model_names)
        self.key_cols = list(key_cols)
        self.index_col = index_col
        self.target_col = target_col

        for group, group_models in models.items():
            missing = [n for n in self.model_names if n not in group_models]
            if missing:
                raise ValueError(f"group {group} is missing models {missing}")

    @property
    def groups(self) -> List[Tuple]:
        return list(self.models.keys())

    def __len__(self):
        return len(self.models)

    def __contains__(self, group) -> bool:
        return _as_key(group) in self.models

    def __getitem__(self, group) -> Dict[str, FittedSeriesModel]:
        return self.models[_as_key(group)]

    def get(self, group, name: str) -> FittedSeriesModel:
        return self.models[_as_key(group)][name]

    def select(self, include: Optional[Iterable[str]] = None,
               exclude: Optional[Iterable[str]] = None) -> 'ModelSet':
        """
        Model set restricted to some of its models

        Args:
            include: Model names to keep (default: all)
            exclude: Model names to drop

        Returns:
            New ModelSet sharing the fitted model objects
        """
        names = list(include) if include is not None else list(self.model_names)
        unknown = [n for n in names if n not in self.model_names]
        if unknown:
            raise KeyError(f"unknown models {unknown}, model set has {self.model_names}")

        excluded = set(exclude or [])
        names = [n for n in names if n not in excluded]

        models = {
            group: {n: group_models[n] for n in names}
            for group, group_models in self.models.items()
        }
        return ModelSet(models, names, self.key_cols, self.index_col, self.target_col)

    def summary(self) -> pd.DataFrame:
        """One row per group with the chosen specification of every model"""
        records = []
        for group, group_models in self.models.items():
            record = dict(zip(self.key_cols, group))
            for name in self.model_names:
                record[name] = group_models[name].description
            records.append(record)
        return pd.DataFrame(records, columns=self.key_cols + self.model_names)

    def __repr__(self):
        return f"ModelSet(groups={len(self)}, models={self.model_names})"


def fit_modelset(df: pd.DataFrame,
                 model_specs: Dict[str, Dict],
                 key_cols: Sequence[str] = ('store', 'brand'),
                 index_col: str = 'week',
                 target_col: str = 'logmove',
                 min_observations: int = 3) -> ModelSet:
    """
    Fit every model specification to every group of a partition

    Groups and models are fitted sequentially. Any failure aborts the call.

    Args:
        df: Training partition
        model_specs: Ordered model name -> specification mapping
        key_cols: Group key columns
        index_col: Integer time index column
        target_col: Target column
        min_observations: Minimum observed values per series

    Returns:
        Complete ModelSet

    Raises:
        ModelFitError: If any (group, model) fit fails
    """
    validate_model_specs(model_specs)

    key_cols = list(key_cols)
    missing_cols = [c for c in key_cols + [index_col, target_col] if c not in df.columns]
    if missing_cols:
        raise ValueError(f"partition is missing columns {missing_cols}")
    if df.empty:
        raise ValueError("cannot fit models to an empty partition")

    models = {}
    for key, group_df in df.groupby(key_cols, sort=True):
        group = _as_key(key)
        periods, values = prepare_series(group_df, index_col, target_col)
        models[group] = {
            name: fit_series_model(name, spec, periods, values, group, min_observations)
            for name, spec in model_specs.items()
        }

    return ModelSet(models, list(model_specs), key_cols, index_col, target_col)
