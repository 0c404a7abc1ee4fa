"""stockbrain.models: Feed-forward network engine."""
from stockbrain.models.activations import Activation
from stockbrain.models.types import LayerSpec, NetworkConfig, TrainingHistory, default_architecture
from stockbrain.models.network import AdamOptimizer, Layer, NeuralNetwork

__all__ = [
    "Activation",
    "LayerSpec",
    "NetworkConfig",
    "TrainingHistory",
    "default_architecture",
    "AdamOptimizer",
    "Layer",
    "NeuralNetwork",
]
