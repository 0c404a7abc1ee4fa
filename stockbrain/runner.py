"""
Train-then-forecast pipeline used by scripts/forecast.py.
"""
from __future__ import annotations
from typing import Optional, Sequence, Tuple

from stockbrain.data.bars import PriceBar
from stockbrain.forecast.predictor import predict_prices
from stockbrain.training.trainer import train_model
from stockbrain.utils.config import PredictorConfig
from stockbrain.utils.types import PredictionResult, TrainedModel


def run(bars: Sequence[PriceBar],
        config: Optional[PredictorConfig] = None,
        days: Optional[int] = None,
        progress: bool = False) -> Tuple[TrainedModel, PredictionResult]:
    """
    Train a model on `bars` and forecast from the same history.

    Workflow:
        1) Build windows + indicators and train a fresh network.
        2) Forecast `days` steps (config.days_to_predict when omitted).

    Returns:
        (model, prediction)
    """
    config = config or PredictorConfig()
    model = train_model(bars, config=config, progress=progress)
    prediction = predict_prices(
        model,
        bars,
        days_to_predict=config.days_to_predict if days is None else days,
    )
    return model, prediction
