"""Smoke test to verify pytest works."""

def test_imports():
    """Test that core libraries import successfully."""
    import pandas as pd
    import numpy as np
    import ta
    import omegaconf
    assert pd.__version__
    assert np.__version__


def test_fixtures(linear_bars, flat_bars):
    """Test that fixtures work."""
    assert len(linear_bars) == 20
    assert linear_bars[0].price == 100.0
    assert linear_bars[-1].price == 119.0
    assert linear_bars[-1].date == '2024-01-20'
    assert {bar.price for bar in flat_bars} == {50.0}
