"""Tests for feature builder."""
import pytest
import numpy as np

from stockbrain.features.builder import (
    FeatureBuilder,
    NormalizationParams,
    build_training_set,
    denormalize,
    feature_width,
    normalize,
)
from stockbrain.features.indicators_backend import compute_indicators, squash


def test_normalize_range():
    normalized, lo, hi = normalize([3.0, 1.0, 2.0, 5.0])

    assert (lo, hi) == (1.0, 5.0)
    np.testing.assert_allclose(normalized, [0.5, 0.0, 0.25, 1.0])


@pytest.mark.parametrize("value", [50.0, 0.01, 1234.5])
def test_normalize_constant_series(value):
    """Constant series map to exactly 0.5 and back to the constant."""
    normalized, lo, hi = normalize([value] * 20)

    assert (normalized == 0.5).all()
    assert lo == hi == value
    assert denormalize(0.5, lo, hi) == value


def test_denormalize_inverts_normalize():
    np.random.seed(42)
    series = 100 + np.cumsum(np.random.randn(100))
    normalized, lo, hi = normalize(series)

    np.testing.assert_allclose(denormalize(normalized, lo, hi), series)


def test_denormalize_extrapolates():
    assert np.isclose(denormalize(1.5, 100.0, 110.0), 115.0)
    assert np.isclose(denormalize(-0.5, 100.0, 110.0), 95.0)


def test_normalize_empty_series():
    with pytest.raises(ValueError):
        normalize([])


def test_normalization_params_apply_and_invert():
    params = NormalizationParams.fit([10.0, 20.0])

    assert params.apply([15.0])[0] == 0.5
    assert params.invert(0.25) == 12.5


def test_feature_width():
    assert feature_width(10) == 16
    assert feature_width(5) == 11


@pytest.mark.parametrize("length", [5, 10, 11, 20, 35])
def test_training_set_size(bar_factory, length):
    """L bars with window W yield max(0, L - W) examples."""
    bars = bar_factory(np.linspace(100.0, 130.0, length))
    examples = build_training_set(bars, sequence_length=10)

    assert len(examples) == max(0, length - 10)


def test_training_example_layout(sample_bars):
    """features = normalized window + squashed indicators at i; target = normalized price at i."""
    prices = np.array([bar.price for bar in sample_bars])
    normalized, _, _ = normalize(prices)
    indicators = squash(compute_indicators(sample_bars))

    examples = build_training_set(sample_bars, sequence_length=10)
    first, last = examples[0], examples[-1]

    assert first.features.shape == (16,)
    np.testing.assert_allclose(first.features[:10], normalized[0:10])
    np.testing.assert_allclose(first.features[10:], indicators[10])
    assert np.isclose(first.target, normalized[10])

    np.testing.assert_allclose(last.features[:10], normalized[-11:-1])
    assert np.isclose(last.target, normalized[-1])


def test_training_features_in_unit_interval(sample_bars):
    for example in build_training_set(sample_bars):
        assert (example.features >= 0).all() and (example.features <= 1).all()
        assert 0 <= example.target <= 1


def test_feature_builder_latest_features(linear_bars):
    builder = FeatureBuilder(sequence_length=10)
    examples = builder.fit_transform(linear_bars)

    assert len(examples) == 10
    assert builder.params == (100.0, 119.0)

    vector = builder.latest_features(linear_bars)
    assert vector.shape == (builder.width,)
    np.testing.assert_allclose(vector[:10], (np.arange(110.0, 120.0) - 100.0) / 19.0)


def test_feature_builder_requires_fit(linear_bars):
    with pytest.raises(RuntimeError):
        FeatureBuilder().latest_features(linear_bars)
