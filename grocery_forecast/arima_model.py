"""
ARIMA Model Module

Fits the ARIMA-family models used for the basic model set:
- mean:  ARIMA(0,0,0) with constant
- naive: ARIMA(0,1,0)
- drift: ARIMA(0,1,0) with drift
- arima: order chosen by statsforecast AutoARIMA, then estimated on the
  series with its gaps

Series may contain NaN for missing weeks; the state space filter skips them.
"""

import numpy as np
import pandas as pd
from statsforecast.models import AutoARIMA
from statsmodels.tsa.arima.model import ARIMA
from typing import Dict, Optional, Tuple
import warnings


def fit_arima(y: np.ndarray, order: Tuple[int, int, int], trend: str = 'n'):
    """
    Fit an ARIMA model of fixed order

    Args:
        y: Series values (NaN marks a missing period)
        order: (p, d, q)
        trend: 'n' (none), 'c' (constant, d=0) or 't' (drift, d=1)

    Returns:
        Fitted statsmodels ARIMAResults
    """
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        model = ARIMA(np.asarray(y, dtype=float), order=tuple(order), trend=trend)
        return model.fit()


def select_order(y: np.ndarray,
                 max_p: int = 3,
                 max_d: int = 2,
                 max_q: int = 3,
                 ic: str = 'aicc',
                 stepwise: bool = True) -> Tuple[Tuple[int, int, int], str]:
    """
    Choose a non-seasonal ARIMA order with statsforecast AutoARIMA

    Interior gaps are linearly interpolated for the search only.

    Args:
        y: Series values (NaN marks a missing period)
        max_p: Maximum AR order
        max_d: Maximum order of differencing
        max_q: Maximum MA order
        ic: Information criterion ('aicc', 'aic' or 'bic')
        stepwise: Use the stepwise search instead of the full grid

    Returns:
        (p, d, q), statsmodels trend
    """
    x = pd.Series(np.asarray(y, dtype=float)).interpolate(limit_area='inside').dropna().to_numpy()

    # AICc is undefined for the smallest samples
    if len(x) <= 3 and ic == 'aicc':
        ic = 'aic'

    model = AutoARIMA(
        max_p=max_p,
        max_d=max_d,
        max_q=max_q,
        seasonal=False,
        ic=ic,
        stepwise=stepwise
    )
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        model.fit(x)

    p, q, _, _, _, d, _ = (int(v) for v in model.model_['arma'])
    coef = model.model_['coef']

    # Log sales are never centred on zero, so a stationary model keeps its mean
    if d == 0:
        trend = 'c'
    elif d == 1 and 'drift' in coef:
        trend = 't'
    else:
        trend = 'n'

    return (p, d, q), trend


def fit_auto_arima(y: np.ndarray,
                   max_p: int = 3,
                   max_d: int = 2,
                   max_q: int = 3,
                   ic: str = 'aicc',
                   stepwise: bool = True) -> Tuple[object, Dict]:
    """
    Fit a non-seasonal ARIMA with automatic order selection

    Args:
        y: Series values (NaN marks a missing period)
        max_p, max_d, max_q, ic, stepwise: Search settings, see select_order()

    Returns:
        fitted_results, {'order': (p, d, q), 'trend': trend}

    Raises:
        ValueError: Series without observations or constant series
    """
    y = np.asarray(y, dtype=float)
    observed = y[~np.isnan(y)]

    if len(observed) == 0:
        raise ValueError("series has no observed values")
    if np.ptp(observed) == 0:
        raise ValueError("constant series, ARIMA order selection is undefined")

    order, trend = select_order(y, max_p=max_p, max_d=max_d, max_q=max_q, ic=ic, stepwise=stepwise)

    return fit_arima(y, order, trend), {'order': order, 'trend': trend}


def describe_arima(order: Tuple[int, int, int], trend: Optional[str]) -> str:
    """Short model label, e.g. 'ARIMA(1,1,0) w/ drift'"""
    p, d, q = order
    label = f"ARIMA({p},{d},{q})"
    if trend == 'c':
        label += " w/ mean"
    elif trend == 't':
        label += " w/ drift"
    return label
