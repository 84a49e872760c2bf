"""
Main Forecasting Pipeline

Two passes over the rolling-origin partitions of the grocery sales data:

Basic models
1. Load the train/test partitions
2. Fit mean, naive, drift and ARIMA per store x brand (one partition per worker)
3. Forecast the test weeks
4. Save model sets and forecasts
5. Evaluate

ETS
6. Load the basic model sets
7. Fill gaps with the basic models, fit ETS (one partition per worker)
8. Forecast, save, evaluate
"""

import pandas as pd
from datetime import datetime
from functools import partial
from typing import Dict, List, Optional

# Import configuration
from config import (
    DATA_CONFIG, SERIES_CONFIG, BASIC_MODELS, ETS_MODELS, IMPUTATION_CONFIG,
    POOL_CONFIG, OUTPUT_CONFIG, EVALUATION_CONFIG
)

# Import custom modules
from grocery_forecast.data_prep import prepare_data
from grocery_forecast.evaluation import evaluate_forecasts
from grocery_forecast.forecast import get_forecasts
from grocery_forecast.parallel import worker_pool, parallel_map
from grocery_forecast.persistence import artifact_path, load_objects, save_objects
from grocery_forecast.training import fit_basic_modelset, fit_ets_modelset


class ForecastingPipeline:
    """Basic model and ETS forecasting runs (configured via config.py)"""

    def __init__(self, data_root: Optional[str] = None, n_workers: Optional[int] = None):
        """
        Initialize pipeline with config from config.py

        Args:
            data_root: Overrides DATA_CONFIG['data_root']
            n_workers: Overrides POOL_CONFIG['n_workers']
        """
        self.example = DATA_CONFIG['example']
        self.data_root = data_root if data_root is not None else DATA_CONFIG['data_root']
        self.n_workers = n_workers if n_workers is not None else POOL_CONFIG['n_workers']
        self.libraries = POOL_CONFIG['libraries']

        # Pipeline components (will be populated)
        self.oj_train: Optional[List[pd.DataFrame]] = None
        self.oj_test: Optional[List[pd.DataFrame]] = None
        self.modelset_basic = None
        self.fcast_basic = None
        self.modelset_ets = None
        self.fcast_ets = None
        self.metrics_basic = None
        self.metrics_ets = None

    def run_complete_pipeline(self) -> Dict:
        """
        Run both passes (configured via config.py)

        Returns:
            Dictionary with pipeline results
        """
        print("\n" + "="*80)
        print("GROCERY SALES FORECASTING PIPELINE")
        print("="*80)
        print(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print("="*80 + "\n")

        self.run_basic_models()
        self.run_ets_models()

        print("\n" + "="*80)
        print("PIPELINE COMPLETE!")
        print("="*80)
        print(f"End time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"\nArtifacts saved to: {artifact_path(self.example, '', self.data_root)}")
        print("="*80 + "\n")

        return {
            'metrics_basic': self.metrics_basic,
            'metrics_ets': self.metrics_ets,
            'fcast_basic': self.fcast_basic,
            'fcast_ets': self.fcast_ets
        }

    def run_basic_models(self) -> pd.DataFrame:
        """Basic model pass: load, fit, forecast, save, evaluate"""
        self.step_1_load_data()
        self.step_2_fit_basic_models()
        self.step_3_save_basic_models()
        self.metrics_basic = self.step_4_evaluate(self.fcast_basic, "BASIC MODELS")
        return self.metrics_basic

    def run_ets_models(self) -> pd.DataFrame:
        """ETS pass: load, fit from the basic model sets, forecast, save, evaluate"""
        if self.oj_train is None:
            self.step_1_load_data()
        self.step_5_load_basic_models()
        self.step_6_fit_ets_models()
        self.step_7_save_ets_models()
        self.metrics_ets = self.step_4_evaluate(self.fcast_ets, "ETS")
        return self.metrics_ets

    def step_1_load_data(self):
        """Step 1: Load (or build) the train/test partitions"""
        print("\n" + "="*80)
        print("STEP 1: DATA LOADING")
        print("="*80)

        data_file = DATA_CONFIG['data_file']
        if DATA_CONFIG['prepare_data'] and not artifact_path(self.example, data_file, self.data_root).exists():
            prepare_data(data_root=self.data_root)

        objects = load_objects(self.example, data_file, self.data_root)
        self.oj_train = objects['oj_train']
        self.oj_test = objects['oj_test']

        if len(self.oj_train) != len(self.oj_test):
            raise ValueError(
                f"oj_train has {len(self.oj_train)} partitions but oj_test has {len(self.oj_test)}"
            )

        print(f"\n  Partitions: {len(self.oj_train)}")
        print(f"  Training rows: {sum(len(df) for df in self.oj_train):,}")
        print(f"  Test rows: {sum(len(df) for df in self.oj_test):,}")

        print("\n✓ Step 1 complete")

    def step_2_fit_basic_models(self):
        """Step 2: Fit basic models and forecast, one partition per worker"""
        print("\n" + "="*80)
        print("STEP 2: BASIC MODEL FITTING")
        print("="*80)
        print(f"  Models: {list(BASIC_MODELS)}")

        fit_fn = partial(fit_basic_modelset, model_specs=BASIC_MODELS, series_config=SERIES_CONFIG)

        with worker_pool(self.n_workers, self.libraries) as pool:
            self.modelset_basic = parallel_map(pool, fit_fn, self.oj_train)
            self.fcast_basic = parallel_map(pool, get_forecasts, self.modelset_basic, self.oj_test)

        print(f"\n  Fitted {sum(len(ms) for ms in self.modelset_basic):,} store-brand model sets")
        print(f"  Forecast rows: {sum(len(df) for df in self.fcast_basic):,}")

        print("\n✓ Step 2 complete")

    def step_3_save_basic_models(self):
        """Step 3: Save basic model sets and forecasts"""
        print("\n" + "="*80)
        print("STEP 3: SAVING BASIC MODELS")
        print("="*80)

        save_objects(
            {
                OUTPUT_CONFIG['basic_modelset_name']: self.modelset_basic,
                OUTPUT_CONFIG['basic_fcast_name']: self.fcast_basic
            },
            self.example, OUTPUT_CONFIG['basic_file'], self.data_root
        )

        print("\n✓ Step 3 complete")

    def step_4_evaluate(self, fcasts: List[pd.DataFrame], label: str) -> pd.DataFrame:
        """Step 4/8: Evaluate the forecasts of all partitions together"""
        print("\n" + "="*80)
        print(f"EVALUATION: {label}")
        print("="*80)

        combined = pd.concat(fcasts, ignore_index=True)
        metrics = evaluate_forecasts(
            combined,
            n_id_cols=EVALUATION_CONFIG['n_id_cols'],
            by_group=EVALUATION_CONFIG['by_group']
        )

        print("\n✓ Evaluation complete")
        return metrics

    def step_5_load_basic_models(self):
        """Step 5: Load the basic model sets the ETS pass imputes from"""
        print("\n" + "="*80)
        print("STEP 5: LOADING BASIC MODELS")
        print("="*80)

        objects = load_objects(self.example, OUTPUT_CONFIG['basic_file'], self.data_root)
        self.modelset_basic = objects[OUTPUT_CONFIG['basic_modelset_name']]

        if len(self.modelset_basic) != len(self.oj_train):
            raise ValueError(
                f"{len(self.modelset_basic)} basic model sets for {len(self.oj_train)} partitions"
            )

        print("\n✓ Step 5 complete")

    def step_6_fit_ets_models(self):
        """Step 6: Impute gaps, fit ETS and forecast, one partition per worker"""
        print("\n" + "="*80)
        print("STEP 6: ETS MODEL FITTING")
        print("="*80)
        print(f"  Imputation excludes: {IMPUTATION_CONFIG['exclude_models']}")

        fit_fn = partial(
            fit_ets_modelset,
            model_specs=ETS_MODELS,
            exclude_models=IMPUTATION_CONFIG['exclude_models'],
            series_config=SERIES_CONFIG
        )

        with worker_pool(self.n_workers, self.libraries) as pool:
            self.modelset_ets = parallel_map(pool, fit_fn, self.oj_train, self.modelset_basic)
            self.fcast_ets = parallel_map(pool, get_forecasts, self.modelset_ets, self.oj_test)

        print(f"\n  Forecast rows: {sum(len(df) for df in self.fcast_ets):,}")

        print("\n✓ Step 6 complete")

    def step_7_save_ets_models(self):
        """Step 7: Save ETS model sets and forecasts"""
        print("\n" + "="*80)
        print("STEP 7: SAVING ETS MODELS")
        print("="*80)

        save_objects(
            {
                OUTPUT_CONFIG['ets_modelset_name']: self.modelset_ets,
                OUTPUT_CONFIG['ets_fcast_name']: self.fcast_ets
            },
            self.example, OUTPUT_CONFIG['ets_file'], self.data_root
        )

        print("\n✓ Step 7 complete")


def main():
    """Main entry point - all configuration is in config.py"""
    pipeline = ForecastingPipeline()
    results = pipeline.run_complete_pipeline()

    print("\nKey Outputs:")
    print(f"  - Basic models: {OUTPUT_CONFIG['basic_file']}")
    print(f"  - ETS models: {OUTPUT_CONFIG['ets_file']}")
    print("="*80 + "\n")

    return results


if __name__ == "__main__":
    main()
