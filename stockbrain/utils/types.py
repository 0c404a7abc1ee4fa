"""
Typed containers passed between training and forecasting.
"""
from __future__ import annotations
from typing import List, NamedTuple

from stockbrain.features.builder import NormalizationParams
from stockbrain.models.network import NeuralNetwork

CONFIDENCE_FLOOR = 0.3
CONFIDENCE_CEILING = 0.95


class TrainedModel(NamedTuple):
    """Frozen network plus the scaling and window it was trained with. Built by training.train_model."""
    network: NeuralNetwork
    normalization: NormalizationParams
    sequence_length: int
    training_error: float
    iterations: int
    indicator_backend: str = "ta"


class PredictionResult(NamedTuple):
    """Forecast for one call of forecast.predict_prices.

    Attributes:
        current_price: Last observed price
        predicted_price: First forecast step
        future_prices: One price per forecast day
        future_dates: ISO date labels matching future_prices
        confidence: Heuristic score in [0.3, 0.95]
        training_error: Echoed from the model
        iterations: Echoed from the model
    """
    current_price: float
    predicted_price: float
    future_prices: List[float]
    future_dates: List[str]
    confidence: float
    training_error: float
    iterations: int

    @property
    def change_percent(self) -> float:
        """Percent move from the current price to the next-step prediction."""
        return (self.predicted_price - self.current_price) / self.current_price * 100

    @property
    def confidence_label(self) -> str:
        if self.confidence >= 0.8:
            return "High"
        if self.confidence >= 0.6:
            return "Medium"
        return "Low"

    def daily_confidences(self, decay: float = 0.05, floor: float = CONFIDENCE_FLOOR) -> List[float]:
        """Confidence per forecast day, reduced by `decay` per day and never below `floor`."""
        return [max(floor, self.confidence - day * decay) for day in range(len(self.future_prices))]
