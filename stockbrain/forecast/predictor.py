"""
Autoregressive multi-day forecasting with a trained model.

Each step feeds the previous normalized prediction back in as the newest
window entry. Indicators are computed once from the real history and reused
unchanged for every future step.
"""
import logging
from typing import Sequence

import numpy as np
import pandas as pd

from stockbrain.data.bars import PriceBar
from stockbrain.errors import InsufficientDataError, PredictionError
from stockbrain.features.builder import make_feature_vector
from stockbrain.features.indicators_backend import compute_indicators, squash
from stockbrain.utils.types import CONFIDENCE_CEILING, CONFIDENCE_FLOOR, PredictionResult, TrainedModel

logger = logging.getLogger(__name__)

PRICE_FLOOR = 0.01
VOLATILITY_WINDOW = 10


def price_volatility(prices: Sequence[float]) -> float:
    """Population standard deviation; 0 for fewer than two prices."""
    values = np.asarray(prices, dtype=float)
    if values.size < 2:
        return 0.0
    return float(values.std())


def confidence_score(training_error: float, recent_prices: Sequence[float], current_price: float) -> float:
    """
    clamp(1 - (training_error * 10 + volatility / current_price), 0.3, 0.95).

    Args:
        training_error: Final mean squared error of the model
        recent_prices: Trailing real prices (the last 10 are used)
        current_price: Last observed price
    """
    recent = list(recent_prices)[-VOLATILITY_WINDOW:]
    relative_volatility = price_volatility(recent) / current_price
    raw = 1.0 - (training_error * 10 + relative_volatility)
    if np.isnan(raw):
        return CONFIDENCE_FLOOR
    return float(np.clip(raw, CONFIDENCE_FLOOR, CONFIDENCE_CEILING))


def future_dates(last_date: str, days: int) -> "list[str]":
    """ISO dates for the `days` calendar days after `last_date` (weekends included)."""
    try:
        start = pd.Timestamp(last_date).normalize()
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Cannot parse date label {last_date!r}") from exc
    return [(start + pd.Timedelta(days=step)).strftime("%Y-%m-%d") for step in range(1, days + 1)]


def predict_prices(model: TrainedModel,
                   bars: Sequence[PriceBar],
                   days_to_predict: int = 5) -> PredictionResult:
    """
    Forecast the next `days_to_predict` prices.

    Args:
        model: Output of training.train_model
        bars: Price history (usually the bars the model was trained on);
            indicators use the backend recorded on the model
        days_to_predict: Forecast horizon N (>= 1)

    Returns:
        PredictionResult with N prices and N dates

    Raises:
        InsufficientDataError: Fewer bars than the model's window
        PredictionError: A non-finite feature or forecast value
    """
    window = model.sequence_length
    if len(bars) < window:
        raise InsufficientDataError(len(bars), window, f"Need at least {window} data points for prediction, got {len(bars)}")
    if days_to_predict < 1:
        raise ValueError(f"days_to_predict ({days_to_predict}) must be >= 1")

    prices = [bar.price for bar in bars]
    params = model.normalization
    sequence = list(params.apply(prices))
    indicators = squash(compute_indicators(bars, backend=model.indicator_backend).iloc[-1])
    if not (np.isfinite(sequence).all() and np.isfinite(indicators).all()):
        raise PredictionError("Non-finite indicator or normalized value in price history")

    dates = future_dates(bars[-1].date, days_to_predict)
    forecast = []
    for step in range(days_to_predict):
        features = make_feature_vector(sequence[-window:], indicators)
        predicted = float(model.network.predict(features)[0])
        if not np.isfinite(predicted):
            raise PredictionError(f"Non-finite forecast at step {step + 1}")
        forecast.append(max(PRICE_FLOOR, float(params.invert(predicted))))
        sequence.append(predicted)

    current_price = prices[-1]
    confidence = confidence_score(model.training_error, prices, current_price)
    logger.info("Forecast %d days from %.4f: next=%.4f confidence=%.2f",
                days_to_predict, current_price, forecast[0], confidence)

    return PredictionResult(
        current_price=current_price,
        predicted_price=forecast[0],
        future_prices=forecast,
        future_dates=dates,
        confidence=confidence,
        training_error=model.training_error,
        iterations=model.iterations,
    )
