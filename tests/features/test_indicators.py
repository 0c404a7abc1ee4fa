"""Tests for technical indicators."""
import pytest
import pandas as pd
import numpy as np
from stockbrain.features.indicators_backend import (
    INDICATOR_NAMES,
    NUM_INDICATORS,
    compute_indicators,
    momentum,
    price_to_sma,
    rolling_volatility,
    sma,
    squash,
    volume_ratio,
)


def test_sma_basic():
    """SMA via ta matches a plain rolling mean and is NaN during warm-up."""
    np.random.seed(42)
    prices = pd.Series(100 + np.cumsum(np.random.randn(50)))

    result = sma(prices, 5, backend='ta')

    assert isinstance(result, pd.Series)
    assert len(result) == len(prices)
    assert result.iloc[:4].isna().all()
    assert np.isclose(result.iloc[4], prices.iloc[:5].mean())
    assert np.allclose(result.iloc[4:], sma(prices, 5, backend='pandas').iloc[4:])


def test_sma_unknown_backend():
    with pytest.raises(ValueError, match="Unknown backend"):
        sma(pd.Series([1.0, 2.0]), 2, backend='talib')


def test_price_to_sma_falls_back_to_price():
    """Before the window fills, the ratio is exactly 1."""
    prices = pd.Series(np.arange(100.0, 120.0))
    ratio = price_to_sma(prices, 5)

    assert (ratio.iloc[:4] == 1.0).all()
    assert np.isclose(ratio.iloc[4], 104.0 / 102.0)


def test_indicator_columns(linear_bars):
    """Exactly the six indicator columns, one row per bar."""
    indicators = compute_indicators(linear_bars)

    assert list(indicators.columns) == list(INDICATOR_NAMES)
    assert indicators.shape == (20, NUM_INDICATORS)
    assert not indicators.isna().any().any()


def test_indicator_values_linear(linear_bars):
    """Hand-computed values on the 100..119 ramp."""
    ind = compute_indicators(linear_bars)

    assert np.isclose(ind['price_sma_20'].iloc[19], 119.0 / 109.5)
    assert (ind['price_sma_20'].iloc[:19] == 1.0).all()
    assert np.isclose(ind['price_sma_10'].iloc[9], 109.0 / 104.5)

    # population std of 100..109 is sqrt(8.25)
    assert (ind['volatility_10'].iloc[:9] == 0.0).all()
    assert np.isclose(ind['volatility_10'].iloc[9], np.sqrt(8.25) / 109.0)

    assert (ind['momentum_5'].iloc[:5] == 0.0).all()
    assert np.isclose(ind['momentum_5'].iloc[5], 0.05)

    # no volume data
    assert (ind['volume_ratio_10'] == 1.0).all()


def test_no_lookahead(sample_bars):
    """Indicators at bar i do not change when later bars are appended."""
    full = compute_indicators(sample_bars)
    partial = compute_indicators(sample_bars[:30])

    np.testing.assert_allclose(full.iloc[:30].values, partial.values)


def test_rolling_volatility_constant_series():
    prices = pd.Series([50.0] * 20)
    assert np.allclose(rolling_volatility(prices), 0.0)


def test_momentum_rate_of_change():
    prices = pd.Series([10.0, 11.0, 12.0, 13.0, 14.0, 15.0, 20.0])
    result = momentum(prices, lag=5)

    assert (result.iloc[:5] == 0.0).all()
    assert np.isclose(result.iloc[5], 0.5)
    assert np.isclose(result.iloc[6], 20.0 / 11.0 - 1)


def test_volume_ratio(sample_bars):
    volumes = pd.Series([bar.volume for bar in sample_bars])
    ratio = volume_ratio(volumes)

    assert (ratio.iloc[:9] == 1.0).all()
    assert np.isclose(ratio.iloc[9], volumes.iloc[9] / volumes.iloc[:10].mean())
    assert np.isclose(ratio.iloc[40], volumes.iloc[40] / volumes.iloc[31:41].mean())


def test_volume_ratio_missing_volume():
    volumes = pd.Series([0.0] * 5 + [100.0] * 10 + [0.0])
    ratio = volume_ratio(volumes)

    assert ratio.iloc[-1] == 1.0
    assert not ratio.isna().any()


def test_backends_agree(sample_bars):
    np.testing.assert_allclose(
        compute_indicators(sample_bars, backend='ta').values,
        compute_indicators(sample_bars, backend='pandas').values,
    )


def test_squash():
    """clamp((x + 1) / 2, 0, 1), NaN preserved."""
    result = squash([-3.0, -1.0, 0.0, 0.5, 1.0, 3.0, np.nan])

    np.testing.assert_allclose(result[:6], [0.0, 0.0, 0.5, 0.75, 1.0, 1.0])
    assert np.isnan(result[6])
