"""
ETS (Exponential Smoothing) Model Module

Fits exponential smoothing models to complete (gap-free) store x brand series.
Two variants:
- fit_ets: statsmodels Holt-Winters of a fixed form, e.g. additive Holt ETS(A,A,N)
- fit_auto_ets: form chosen by statsforecast AutoETS
"""

import numpy as np
from statsforecast.models import AutoETS
from statsmodels.tsa.holtwinters import ExponentialSmoothing
from typing import Dict, Optional
import warnings


def fit_ets(y: np.ndarray,
            trend: Optional[str] = 'add',
            seasonal: Optional[str] = None,
            seasonal_periods: Optional[int] = None,
            damped_trend: bool = False,
            smoothing_level: Optional[float] = None,
            smoothing_trend: Optional[float] = None):
    """
    Fit an exponential smoothing model

    Args:
        y: Series values, must not contain NaN
        trend: Trend type ('add', 'mul', or None)
        seasonal: Seasonal type ('add', 'mul', or None)
        seasonal_periods: Number of periods in seasonal cycle
        damped_trend: Use damped trend
        smoothing_level: Alpha parameter (0-1); None lets the model optimize
        smoothing_trend: Beta parameter (0-1); None lets the model optimize

    Returns:
        Fitted statsmodels HoltWintersResults

    Raises:
        ValueError: If the series has missing values
    """
    y = np.asarray(y, dtype=float)

    if np.isnan(y).any():
        raise ValueError(
            f"ETS requires a complete series, found {int(np.isnan(y).sum())} missing values"
        )

    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        model = ExponentialSmoothing(
            y,
            trend=trend,
            seasonal=seasonal,
            seasonal_periods=seasonal_periods,
            damped_trend=damped_trend,
            initialization_method='estimated'
        )

        # Fixed smoothing only when every parameter the model has is provided
        fixed = smoothing_level is not None and (trend is None or smoothing_trend is not None)
        if fixed:
            fit_kwargs = {'smoothing_level': smoothing_level, 'optimized': False}
            if trend is not None:
                fit_kwargs['smoothing_trend'] = smoothing_trend
            if damped_trend:
                fit_kwargs['damping_trend'] = 0.98  # Standard damping value
            return model.fit(**fit_kwargs)

        return model.fit(optimized=True, use_brute=False)


def describe_ets(trend: Optional[str],
                 seasonal: Optional[str],
                 damped_trend: bool = False,
                 error: str = 'add') -> str:
    """Short model label in ETS(error,trend,season) notation, e.g. 'ETS(A,A,N)'"""
    # statsmodels names ('add', 'mul', None) and AutoETS letters ('A', 'M', 'N')
    letters = {'add': 'A', 'mul': 'M', None: 'N', 'A': 'A', 'M': 'M', 'N': 'N'}
    trend_label = letters.get(trend, 'N')
    if damped_trend and trend_label != 'N':
        trend_label += 'd'
    return f"ETS({letters.get(error, 'A')},{trend_label},{letters.get(seasonal, 'N')})"


def fit_auto_ets(y: np.ndarray, model: str = 'ZZN', damped: Optional[bool] = None):
    """
    Fit an exponential smoothing model whose form is chosen by statsforecast AutoETS

    Args:
        y: Series values, must not contain NaN
        model: Error, trend and season letters; 'Z' lets AutoETS choose
        damped: Force (True) or forbid (False) trend damping; None lets AutoETS choose

    Returns:
        Fitted statsforecast AutoETS

    Raises:
        ValueError: If the series has missing values
    """
    y = np.asarray(y, dtype=float)

    if np.isnan(y).any():
        raise ValueError(
            f"ETS requires a complete series, found {int(np.isnan(y).sum())} missing values"
        )

    auto_ets = AutoETS(season_length=1, model=model, damped=damped)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        auto_ets.fit(y)
    return auto_ets


def auto_ets_components(fitted) -> Dict[str, object]:
    """Error, trend and season letters plus damping of a fitted AutoETS"""
    error, trend, season, damped = fitted.model_['components'][:4]
    return {
        'error': str(error),
        'trend': str(trend),
        'seasonal': str(season),
        'damped_trend': str(damped) == 'True',
    }
