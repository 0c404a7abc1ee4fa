"""Type definitions for the feed-forward network."""
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from stockbrain.models.activations import Activation


@dataclass
class LayerSpec:
    """One entry of a network architecture.

    The first entry of an architecture only declares the input width; its
    activation, batch_norm and dropout are ignored.

    Attributes:
        size: Number of units
        activation: Activation name ('sigmoid', 'relu', 'leakyRelu', 'tanh', 'elu', 'linear')
        batch_norm: Normalize the weighted sum before the activation
        dropout: Probability of dropping each unit while training
    """
    size: int
    activation: str = "relu"
    batch_norm: bool = False
    dropout: float = 0.0

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.size <= 0:
            raise ValueError(f"size ({self.size}) must be positive")
        if not 0 <= self.dropout < 1:
            raise ValueError(f"dropout ({self.dropout}) must be in [0, 1)")
        Activation.parse(self.activation)

    @property
    def kind(self) -> Activation:
        return Activation.parse(self.activation)


def default_architecture(input_dim: int = 16) -> List[LayerSpec]:
    """input -> 32 relu -> 16 tanh -> 8 relu -> 1 sigmoid, batch norm and dropout on the wide layers."""
    return [
        LayerSpec(input_dim, "relu", batch_norm=True, dropout=0.1),
        LayerSpec(32, "relu", batch_norm=True, dropout=0.2),
        LayerSpec(16, "tanh", batch_norm=True, dropout=0.1),
        LayerSpec(8, "relu"),
        LayerSpec(1, "sigmoid"),
    ]


@dataclass
class NetworkConfig:
    """Configuration for a NeuralNetwork and its Adam optimizer.

    Attributes:
        architecture: Layer specs, input layer first
        learning_rate: Adam step size
        beta1: Decay of the first-moment estimate
        beta2: Decay of the second-moment estimate
        epsilon: Denominator guard in the Adam update
        bn_momentum: Weight of the previous running statistic in batch norm
        seed: Seed for weight init and dropout masks (None = fresh entropy)
    """
    architecture: List[LayerSpec] = field(default_factory=default_architecture)
    learning_rate: float = 0.01
    beta1: float = 0.9
    beta2: float = 0.999
    epsilon: float = 1e-8
    bn_momentum: float = 0.9
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration parameters."""
        if len(self.architecture) < 2:
            raise ValueError(
                f"architecture needs an input layer and at least one more layer, got {len(self.architecture)}"
            )
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate ({self.learning_rate}) must be positive")
        if not 0 <= self.beta1 < 1:
            raise ValueError(f"beta1 ({self.beta1}) must be in [0, 1)")
        if not 0 <= self.beta2 < 1:
            raise ValueError(f"beta2 ({self.beta2}) must be in [0, 1)")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon ({self.epsilon}) must be positive")
        if not 0 <= self.bn_momentum < 1:
            raise ValueError(f"bn_momentum ({self.bn_momentum}) must be in [0, 1)")

    @property
    def input_dim(self) -> int:
        return self.architecture[0].size

    @property
    def output_dim(self) -> int:
        return self.architecture[-1].size


class TrainingHistory(NamedTuple):
    """Outcome of NeuralNetwork.train.

    Attributes:
        errors: Mean squared error of every epoch that ran
        iterations: Number of epochs actually run
        converged: Whether the error threshold stopped training early
    """
    errors: List[float]
    iterations: int
    converged: bool

    @property
    def final_error(self) -> float:
        return self.errors[-1] if self.errors else float("nan")
