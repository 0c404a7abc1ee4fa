"""Activation functions with derivatives expressed in terms of their own output."""
from enum import Enum

import numpy as np

SIGMOID_CLIP = 500.0
LEAKY_SLOPE = 0.01


class Activation(Enum):
    """Closed set of unit activations.

    `forward` maps pre-activation z to output y. `derivative` takes the
    *output* y (not z) and returns dy/dz, which is what backpropagation
    multiplies by. Sigmoid's y(1-y) is the canonical example.
    """
    SIGMOID = "sigmoid"
    RELU = "relu"
    LEAKY_RELU = "leakyRelu"
    TANH = "tanh"
    ELU = "elu"
    LINEAR = "linear"

    @classmethod
    def parse(cls, name: "str | Activation") -> "Activation":
        """Look up an activation by value ('leakyRelu') or member name ('LEAKY_RELU')."""
        if isinstance(name, cls):
            return name
        for member in cls:
            if name == member.value or str(name).upper() == member.name:
                return member
        raise ValueError(f"Unknown activation: {name!r} (expected one of {[m.value for m in cls]})")

    @property
    def uses_he_init(self) -> bool:
        """Rectifier-style activations get He scaling, the rest Xavier."""
        return self in (Activation.RELU, Activation.LEAKY_RELU, Activation.ELU)

    def forward(self, z: np.ndarray) -> np.ndarray:
        if self is Activation.SIGMOID:
            return 1.0 / (1.0 + np.exp(-np.clip(z, -SIGMOID_CLIP, SIGMOID_CLIP)))
        if self is Activation.RELU:
            return np.maximum(z, 0.0)
        if self is Activation.LEAKY_RELU:
            return np.where(z > 0, z, LEAKY_SLOPE * z)
        if self is Activation.TANH:
            return np.tanh(z)
        if self is Activation.ELU:
            # expm1 only ever sees non-positive inputs
            return np.where(z >= 0, z, np.expm1(np.minimum(z, 0.0)))
        return np.asarray(z, dtype=float)

    def derivative(self, y: np.ndarray) -> np.ndarray:
        if self is Activation.SIGMOID:
            return y * (1.0 - y)
        if self is Activation.RELU:
            return (y > 0).astype(float)
        if self is Activation.LEAKY_RELU:
            return np.where(y > 0, 1.0, LEAKY_SLOPE)
        if self is Activation.TANH:
            return 1.0 - y * y
        if self is Activation.ELU:
            return np.where(y >= 0, 1.0, y + 1.0)
        return np.ones_like(y, dtype=float)
