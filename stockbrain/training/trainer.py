"""
Training entrypoint: price bars -> frozen TrainedModel.
"""
import logging
from typing import Optional, Sequence

import numpy as np

from stockbrain.data.bars import PriceBar
from stockbrain.errors import InsufficientDataError, TrainingError
from stockbrain.features.builder import NormalizationParams, build_training_set
from stockbrain.models.network import NeuralNetwork
from stockbrain.utils.config import PredictorConfig
from stockbrain.utils.types import TrainedModel

logger = logging.getLogger(__name__)


def train_model(bars: Sequence[PriceBar],
                epochs: Optional[int] = None,
                error_threshold: Optional[float] = None,
                config: Optional[PredictorConfig] = None,
                progress: bool = False) -> TrainedModel:
    """
    Train a fresh network on a price history.

    Args:
        bars: Chronological price bars (at least sequence_length + min_training_examples).
        epochs: Epoch cap (defaults to config.epochs).
        error_threshold: Early-stop error (defaults to config.error_threshold).
        config: Predictor settings; defaults to PredictorConfig().
        progress: Show a tqdm bar while training.

    Returns:
        TrainedModel holding the frozen network and the normalization fitted on `bars`.

    Raises:
        InsufficientDataError: Too few bars; raised before any network is built.
        TrainingError: Non-finite features or training values.
    """
    config = config or PredictorConfig()
    epochs = config.epochs if epochs is None else epochs
    error_threshold = config.error_threshold if error_threshold is None else error_threshold
    window = config.sequence_length
    required = window + config.min_training_examples

    if len(bars) < window + 1:
        raise InsufficientDataError(len(bars), required)

    params = NormalizationParams.fit([bar.price for bar in bars])
    if not (np.isfinite(params.min) and np.isfinite(params.max)):
        raise TrainingError("Non-finite values in price history")

    examples = build_training_set(bars, window, params, config.indicator_backend)
    if len(examples) < config.min_training_examples:
        raise InsufficientDataError(
            len(bars), required,
            f"Not enough data to create training sequences: need at least {required} data points, got {len(bars)}",
        )
    for example in examples:
        if not np.isfinite(example.features).all() or not np.isfinite(example.target):
            raise TrainingError("Non-finite indicator or normalized value in training examples")

    network = NeuralNetwork(config.network_config())
    logger.info("Training on %d examples (%d bars, window=%d, max epochs=%d)",
                len(examples), len(bars), window, epochs)
    history = network.train(examples, epochs=epochs, error_threshold=error_threshold, progress=progress)
    network.freeze()
    logger.info("Training finished after %d epochs: mse=%.6f%s",
                history.iterations, history.final_error, " (converged)" if history.converged else "")

    return TrainedModel(
        network=network,
        normalization=params,
        sequence_length=window,
        training_error=history.final_error,
        iterations=history.iterations,
        indicator_backend=config.indicator_backend,
    )
