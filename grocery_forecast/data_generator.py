"""
Synthetic Data Generator

Generates weekly store x brand orange juice sales in the layout of the raw
OJ dataset: store, brand, week, logmove, price, deal, feat.

A share of store-brand-weeks is dropped so that series contain gaps, as the
real data does.
"""

import pandas as pd
import numpy as np
from typing import List, Optional


class SyntheticDataGenerator:
    """Generate synthetic weekly store x brand sales"""

    def __init__(self,
                 stores: Optional[List[int]] = None,
                 brands: Optional[List[int]] = None,
                 first_week: int = 40,
                 last_week: int = 160,
                 missing_rate: float = 0.05,
                 seed: int = 42):
        """
        Initialize data generator

        Args:
            stores: Store ids
            brands: Brand ids
            first_week: First week to generate
            last_week: Last week to generate (inclusive)
            missing_rate: Share of store-brand-weeks dropped (0-1)
            seed: Random seed for reproducibility
        """
        if last_week <= first_week:
            raise ValueError(f"last_week ({last_week}) must be after first_week ({first_week})")
        if not 0 <= missing_rate < 1:
            raise ValueError(f"missing_rate must be in [0, 1), got {missing_rate}")

        self.stores = stores or [2, 5, 8]
        self.brands = brands or [1, 2, 3]
        self.weeks = np.arange(first_week, last_week + 1)
        self.missing_rate = missing_rate
        self.rng = np.random.default_rng(seed)

    def _generate_series(self, store: int, brand: int) -> pd.DataFrame:
        """Weekly sales of one store x brand"""
        n_weeks = len(self.weeks)

        base_level = self.rng.normal(9.0, 0.6)
        base_price = self.rng.uniform(0.02, 0.05)
        elasticity = self.rng.uniform(-3.0, -1.5)

        # Promotions lower the price and lift sales
        deal = (self.rng.random(n_weeks) < 0.2).astype(int)
        feat = (self.rng.random(n_weeks) < 0.15).astype(int)
        price = base_price * (1 - deal * self.rng.uniform(0.1, 0.3, n_weeks))

        # Slowly drifting AR(1) disturbance
        noise = np.zeros(n_weeks)
        shocks = self.rng.normal(0, 0.25, n_weeks)
        for t in range(1, n_weeks):
            noise[t] = 0.6 * noise[t - 1] + shocks[t]

        logmove = (base_level
                   + elasticity * np.log(price / base_price)
                   + 0.3 * deal
                   + 0.5 * feat
                   + noise)

        return pd.DataFrame({
            'store': store,
            'brand': brand,
            'week': self.weeks,
            'logmove': np.round(logmove, 4),
            'price': np.round(price, 4),
            'deal': deal,
            'feat': feat,
        })

    def generate_sales_data(self) -> pd.DataFrame:
        """
        Generate store x brand x week data

        The first and last week of every series are always kept, so every
        series spans the full range.

        Returns:
            DataFrame with columns: store, brand, week, logmove, price, deal, feat
        """
        print("\nGenerating synthetic store x brand weekly sales...")
        print(f"  Stores: {len(self.stores)}, brands: {len(self.brands)}")
        print(f"  Weeks: {self.weeks[0]} to {self.weeks[-1]}")

        frames = [self._generate_series(s, b) for s in self.stores for b in self.brands]
        df = pd.concat(frames, ignore_index=True)

        interior = ~df['week'].isin([self.weeks[0], self.weeks[-1]])
        dropped = interior & (self.rng.random(len(df)) < self.missing_rate)
        df = df[~dropped].reset_index(drop=True)

        print(f"  Generated {len(df):,} store-brand-week records ({dropped.sum():,} dropped as gaps)")
        print(f"  Mean logmove: {df['logmove'].mean():.2f}")

        return df


def generate_sales_data(**kwargs) -> pd.DataFrame:
    """
    Convenience function to generate synthetic sales

    Args:
        **kwargs: Arguments for SyntheticDataGenerator

    Returns:
        DataFrame of weekly store x brand sales
    """
    return SyntheticDataGenerator(**kwargs).generate_sales_data()
