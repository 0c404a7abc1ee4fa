"""Shared fixtures for model tests."""
import pytest
import numpy as np

from stockbrain.models.types import LayerSpec, NetworkConfig


@pytest.fixture
def small_config():
    """4 -> 8 tanh -> 1 sigmoid, seeded."""
    return NetworkConfig(
        architecture=[LayerSpec(4), LayerSpec(8, "tanh"), LayerSpec(1, "sigmoid")],
        learning_rate=0.05,
        seed=42,
    )


@pytest.fixture
def toy_examples():
    """Targets are the mean of four uniform inputs."""
    rng = np.random.default_rng(0)
    X = rng.uniform(0, 1, size=(32, 4))
    return [(x, float(x.mean())) for x in X]
