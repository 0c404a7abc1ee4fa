"""
Technical indicators for the price predictor (moving averages via 'ta').

Every indicator at bar i uses only bars <= i. Warm-up periods fall back to
neutral values instead of NaN so the first bars still yield a full row.
"""
from __future__ import annotations
from typing import List, Literal, Sequence

import numpy as np
import pandas as pd

from stockbrain.data.bars import PriceBar, prices_of, volumes_of

INDICATOR_NAMES = (
    "price_sma_5",
    "price_sma_10",
    "price_sma_20",
    "volatility_10",
    "momentum_5",
    "volume_ratio_10",
)
NUM_INDICATORS = len(INDICATOR_NAMES)


def sma(prices: pd.Series,
        window: int,
        backend: Literal["ta", "pandas"] = "ta") -> pd.Series:
    """
    Simple moving average; NaN until `window` prices are available.

    Args:
        prices: Series of close prices.
        window: Number of trailing prices averaged.
        backend: 'ta' (SMAIndicator) or 'pandas' (rolling mean).

    Returns:
        Series aligned to prices.
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    if backend == "ta":
        from ta.trend import SMAIndicator
        return SMAIndicator(close=prices, window=window, fillna=False).sma_indicator()
    elif backend == "pandas":
        return prices.rolling(window=window, min_periods=window).mean()
    else:
        raise ValueError(f"Unknown backend: {backend}")


def price_to_sma(prices: pd.Series,
                 window: int,
                 backend: Literal["ta", "pandas"] = "ta") -> pd.Series:
    """
    Price divided by its trailing SMA.

    Before `window` prices exist the SMA falls back to the price itself, so
    the ratio is exactly 1.
    """
    average = sma(prices, window, backend=backend).fillna(prices)
    return prices / average


def rolling_volatility(prices: pd.Series, window: int = 10) -> pd.Series:
    """
    Population std-dev of the trailing `window` prices divided by price.

    Zero during warm-up.
    """
    std = prices.rolling(window=window, min_periods=window).std(ddof=0)
    return (std / prices).fillna(0.0)


def momentum(prices: pd.Series, lag: int = 5) -> pd.Series:
    """Rate of change over `lag` bars: (p[i] - p[i-lag]) / p[i-lag]; zero during warm-up."""
    return prices.pct_change(periods=lag, fill_method=None).fillna(0.0)


def volume_ratio(volumes: pd.Series, window: int = 10) -> pd.Series:
    """
    Volume over its trailing mean.

    1 where volume is missing/non-positive or fewer than `window` bars exist.
    """
    average = volumes.rolling(window=window, min_periods=window).mean().fillna(volumes)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = volumes / average
    return ratio.where(volumes > 0, 1.0)


def compute_indicators(bars: Sequence[PriceBar],
                       backend: Literal["ta", "pandas"] = "ta") -> pd.DataFrame:
    """
    Compute the raw indicator table, one row per bar.

    Columns (see INDICATOR_NAMES):
        price / SMA5, price / SMA10, price / SMA20,
        10-bar volatility / price, 5-bar momentum, 10-bar volume ratio.

    Args:
        bars: Chronological price bars.
        backend: Moving-average backend passed to `sma`.

    Returns:
        DataFrame of shape (len(bars), NUM_INDICATORS) with raw values.
    """
    prices = prices_of(bars)
    volumes = volumes_of(bars)

    return pd.DataFrame({
        "price_sma_5": price_to_sma(prices, 5, backend=backend),
        "price_sma_10": price_to_sma(prices, 10, backend=backend),
        "price_sma_20": price_to_sma(prices, 20, backend=backend),
        "volatility_10": rolling_volatility(prices, 10),
        "momentum_5": momentum(prices, 5),
        "volume_ratio_10": volume_ratio(volumes, 10),
    }, columns=list(INDICATOR_NAMES))


def squash(values: "np.ndarray | pd.DataFrame | List[float]") -> np.ndarray:
    """
    Map raw indicator values into [0, 1] with clamp((x + 1) / 2, 0, 1).

    NaN passes through unchanged so callers can detect it.
    """
    raw = np.asarray(values, dtype=float)
    return np.clip((raw + 1.0) / 2.0, 0.0, 1.0)
