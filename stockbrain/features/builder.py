"""
Feature builder for the price predictor.

Combines:
- Min/max normalized close prices (sliding window of W bars)
- Six technical indicators squashed into [0, 1]

Each training example pairs the window ending at bar i-1 (plus the indicators
at bar i) with the normalized price at bar i.
"""
from __future__ import annotations
from typing import List, Literal, NamedTuple, Sequence, Tuple

import numpy as np

from stockbrain.data.bars import PriceBar
from stockbrain.features.indicators_backend import NUM_INDICATORS, compute_indicators, squash

DEFAULT_SEQUENCE_LENGTH = 10


class NormalizationParams(NamedTuple):
    """(min, max) of a price series; a constant series maps to 0.5."""
    min: float
    max: float

    @classmethod
    def fit(cls, series: "Sequence[float] | np.ndarray") -> "NormalizationParams":
        values = np.asarray(series, dtype=float)
        if values.size == 0:
            raise ValueError("Cannot normalize an empty series")
        return cls(float(values.min()), float(values.max()))

    def apply(self, series: "Sequence[float] | np.ndarray") -> np.ndarray:
        values = np.asarray(series, dtype=float)
        span = self.max - self.min
        if span == 0:
            return np.full_like(values, 0.5)
        return (values - self.min) / span

    def invert(self, value: "float | np.ndarray") -> "float | np.ndarray":
        return denormalize(value, self.min, self.max)


class TrainingExample(NamedTuple):
    """(features, target) pair; features = window prices + squashed indicators."""
    features: np.ndarray
    target: float


def normalize(series: "Sequence[float] | np.ndarray") -> Tuple[np.ndarray, float, float]:
    """
    Min/max scale a series into [0, 1].

    Returns:
        (normalized, min, max). If max == min every value is exactly 0.5.
    """
    params = NormalizationParams.fit(series)
    return params.apply(series), params.min, params.max


def denormalize(value: "float | np.ndarray", min_value: float, max_value: float) -> "float | np.ndarray":
    """Inverse of `normalize`: value * (max - min) + min (extrapolates linearly)."""
    return value * (max_value - min_value) + min_value


def feature_width(sequence_length: int = DEFAULT_SEQUENCE_LENGTH) -> int:
    """Length of a feature vector for a given window length."""
    return sequence_length + NUM_INDICATORS


def make_feature_vector(window: "Sequence[float] | np.ndarray",
                        squashed_indicators: "Sequence[float] | np.ndarray") -> np.ndarray:
    """Concatenate a normalized price window with squashed indicators."""
    return np.concatenate([
        np.asarray(window, dtype=float),
        np.asarray(squashed_indicators, dtype=float),
    ])


def build_training_set(bars: Sequence[PriceBar],
                       sequence_length: int = DEFAULT_SEQUENCE_LENGTH,
                       params: "NormalizationParams | None" = None,
                       indicator_backend: Literal["ta", "pandas"] = "ta") -> List[TrainingExample]:
    """
    Build supervised (window -> next price) examples.

    For every i in [W, len(bars)):
        features = normalized prices[i-W:i] + squashed indicators[i]
        target   = normalized price[i]

    Args:
        bars: Chronological price bars.
        sequence_length: Window length W.
        params: Normalization to use (fit on `bars` if omitted).
        indicator_backend: Moving-average backend for indicators.

    Returns:
        Exactly max(0, len(bars) - W) examples; empty when there is no bar
        after the first window.
    """
    if sequence_length < 1:
        raise ValueError(f"sequence_length must be >= 1, got {sequence_length}")
    if len(bars) <= sequence_length:
        return []

    prices = [bar.price for bar in bars]
    if params is None:
        params = NormalizationParams.fit(prices)
    normalized = params.apply(prices)
    indicators = squash(compute_indicators(bars, backend=indicator_backend))

    return [
        TrainingExample(
            features=make_feature_vector(normalized[i - sequence_length:i], indicators[i]),
            target=float(normalized[i]),
        )
        for i in range(sequence_length, len(bars))
    ]


class FeatureBuilder:
    """
    Stateful wrapper that remembers the normalization fitted on history.

    Usage:
        builder = FeatureBuilder(sequence_length=10)
        examples = builder.fit_transform(bars)
        vector = builder.latest_features(bars)
    """

    def __init__(self,
                 sequence_length: int = DEFAULT_SEQUENCE_LENGTH,
                 indicator_backend: Literal["ta", "pandas"] = "ta"):
        if sequence_length < 1:
            raise ValueError(f"sequence_length must be >= 1, got {sequence_length}")
        self.sequence_length = sequence_length
        self.indicator_backend = indicator_backend
        self.params: "NormalizationParams | None" = None

    @property
    def width(self) -> int:
        return feature_width(self.sequence_length)

    def fit(self, bars: Sequence[PriceBar]) -> "FeatureBuilder":
        self.params = NormalizationParams.fit([bar.price for bar in bars])
        return self

    def fit_transform(self, bars: Sequence[PriceBar]) -> List[TrainingExample]:
        self.fit(bars)
        return build_training_set(bars, self.sequence_length, self.params, self.indicator_backend)

    def latest_indicators(self, bars: Sequence[PriceBar]) -> np.ndarray:
        """Squashed indicators of the last bar."""
        return squash(compute_indicators(bars, backend=self.indicator_backend).iloc[-1])

    def latest_features(self, bars: Sequence[PriceBar]) -> np.ndarray:
        """Feature vector built from the last W bars and the last bar's indicators."""
        if self.params is None:
            raise RuntimeError("FeatureBuilder.fit must be called first")
        if len(bars) < self.sequence_length:
            raise ValueError(f"Need at least {self.sequence_length} bars, got {len(bars)}")
        window = self.params.apply([bar.price for bar in bars[-self.sequence_length:]])
        return make_feature_vector(window, self.latest_indicators(bars))
