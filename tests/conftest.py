"""Shared test fixtures for stockbrain tests."""
import pytest
import pandas as pd
import numpy as np

from stockbrain.data.bars import PriceBar


def make_bars(prices, volumes=None, start='2024-01-01'):
    """Build daily PriceBars from a list of closes."""
    dates = pd.date_range(start, periods=len(prices), freq='D')
    if volumes is None:
        volumes = [0.0] * len(prices)
    return [
        PriceBar(date=d.strftime('%Y-%m-%d'), price=float(p), volume=float(v))
        for d, p, v in zip(dates, prices, volumes)
    ]


@pytest.fixture
def linear_bars():
    """20 bars rising 1.00/day from 100.00 to 119.00."""
    return make_bars(np.arange(100.0, 120.0))


@pytest.fixture
def flat_bars():
    """20 bars at a constant 50.00."""
    return make_bars([50.0] * 20)


@pytest.fixture
def sample_bars():
    """Create a 60-bar random walk with volume."""
    np.random.seed(42)
    prices = 100 + np.cumsum(np.random.randn(60))
    volumes = np.random.randint(1_000_000, 5_000_000, size=60)
    return make_bars(prices, volumes)


@pytest.fixture
def temp_price_csvs(tmp_path):
    """Create temporary per-symbol CSV files for testing."""
    np.random.seed(42)
    prices_dir = tmp_path / "prices"
    prices_dir.mkdir()

    for symbol in ['AAPL', 'GOOGL']:
        dates = pd.date_range('2024-01-01', periods=40, freq='D')
        closes = 100 + np.cumsum(np.random.randn(len(dates)))
        df = pd.DataFrame({
            'date': dates.strftime('%Y-%m-%d'),
            'open': closes - 0.5,
            'high': closes + 1.0,
            'low': closes - 1.0,
            'close': closes,
            'volume': np.random.randint(1_000_000, 5_000_000, size=len(dates)),
        })
        # newest first, like most vendor exports
        df.iloc[::-1].to_csv(prices_dir / f"{symbol}.csv", index=False)

    return str(prices_dir)


@pytest.fixture
def bar_factory():
    """Expose make_bars to tests."""
    return make_bars
