"""Exceptions raised by the training and forecasting calls."""
from typing import Optional


class StockBrainError(Exception):
    """Base class for all stockbrain failures."""


class InsufficientDataError(StockBrainError, ValueError):
    """Too few price bars to build the requested windows.

    Attributes:
        available: Number of bars (or examples) supplied
        required: Minimum number needed
    """

    def __init__(self, available: int, required: int, message: Optional[str] = None):
        self.available = available
        self.required = required
        if message is None:
            message = f"Need at least {required} data points, got {available}"
        super().__init__(message)


class TrainingError(StockBrainError, RuntimeError):
    """Non-finite values appeared while preparing data or training."""


class PredictionError(StockBrainError, RuntimeError):
    """Non-finite values appeared while producing a forecast."""
