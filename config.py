"""
Configuration File for Grocery Sales Forecasting Pipeline

Central place to configure all parameters for the store x brand forecasting runs.
Modify values here to experiment with different settings.
"""

# ==============================================================================
# DATA
# ==============================================================================
DATA_CONFIG = {
    'example': 'grocery_sales',     # Sub-directory of data_root holding artifacts
    'data_root': 'data',
    'data_file': 'data.joblib',     # Artifact holding oj_train / oj_test
    'raw_file': 'yx.csv',           # Raw OJ sales file (store, brand, week, logmove, ...)
    'prepare_data': True,           # Build the data artifact if it does not exist yet
    'generate_new_data': False,     # Use synthetic data instead of raw_file

    # Synthetic data (only used when generate_new_data is True or raw_file is missing)
    'stores': [2, 5, 8, 9, 12],
    'brands': [1, 2, 3],
    'first_week': 40,
    'last_week': 160,
    'missing_rate': 0.05,           # Share of store-brand-weeks dropped to create gaps
    'seed': 42
}

# ==============================================================================
# ROLLING-ORIGIN SPLITS
# ==============================================================================
SPLIT_CONFIG = {
    'first_week': 40,   # First training week of every split
    'last_week': 160,   # Last test week of the final split
    'n_splits': 10,
    'horizon': 2,       # Test weeks per split
    'gap': 2            # Test starts `gap` weeks after the training end
}

# ==============================================================================
# SERIES LAYOUT
# ==============================================================================
SERIES_CONFIG = {
    'key_cols': ['store', 'brand'],
    'index_col': 'week',
    'target_col': 'logmove',
    'min_observations': 3
}

# ==============================================================================
# BASIC MODELS (first pass)
# ==============================================================================
BASIC_MODELS = {
    'mean': {'kind': 'arima', 'order': (0, 0, 0), 'trend': 'c'},
    'naive': {'kind': 'arima', 'order': (0, 1, 0), 'trend': 'n'},
    'drift': {'kind': 'arima', 'order': (0, 1, 0), 'trend': 't'},
    'arima': {'kind': 'auto_arima', 'max_p': 3, 'max_d': 2, 'max_q': 3, 'ic': 'aicc'}
}

# ==============================================================================
# ETS MODEL CONFIGURATION (second pass)
# ==============================================================================
ETS_CONFIG = {
    'kind': 'ets',
    'trend': 'add',           # 'add', 'mul', or None
    'seasonal': None,         # 'add', 'mul', or None
    'seasonal_periods': None,
    'damped_trend': False,

    # Smoothing parameters (set to None to let model optimize)
    'smoothing_level': None,
    'smoothing_trend': None
}

# Form chosen per series by AutoETS ('Z' = automatic), non-seasonal
ETS_AUTO_CONFIG = {
    'kind': 'auto_ets',
    'model': 'ZZN',
    'damped': None
}

# Use ETS_CONFIG instead to fit the same fixed form to every series
ETS_MODELS = {
    'ets': ETS_AUTO_CONFIG
}

# ==============================================================================
# IMPUTATION (gap filling before ETS)
# ==============================================================================
IMPUTATION_CONFIG = {
    # Basic models not used as the imputation source; the rest are averaged
    'exclude_models': ['mean', 'naive', 'drift']
}

# ==============================================================================
# WORKER POOL
# ==============================================================================
POOL_CONFIG = {
    'n_workers': None,  # None = cpu_count() - 1 (at least 1)
    'libraries': ['numpy', 'pandas', 'statsmodels.api', 'statsforecast.models', 'grocery_forecast']
}

# ==============================================================================
# OUTPUT CONFIGURATION
# ==============================================================================
OUTPUT_CONFIG = {
    'basic_file': 'model_basic.joblib',
    'basic_modelset_name': 'oj_modelset_basic',
    'basic_fcast_name': 'oj_fcast_basic',
    'ets_file': 'model_ets.joblib',
    'ets_modelset_name': 'oj_modelset_ets',
    'ets_fcast_name': 'oj_fcast_ets'
}

# ==============================================================================
# EVALUATION
# ==============================================================================
EVALUATION_CONFIG = {
    'n_id_cols': 3,     # store, brand, week precede the value columns
    'by_group': False   # True = one row per model x group
}
