"""
Predictor configuration and OmegaConf helpers (YAML file + CLI-style overrides).
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from omegaconf import OmegaConf

from stockbrain.features.builder import DEFAULT_SEQUENCE_LENGTH, feature_width
from stockbrain.models.types import LayerSpec, NetworkConfig, default_architecture


@dataclass
class PredictorConfig:
    """End-to-end settings for training and forecasting.

    Attributes:
        sequence_length: Window length W of normalized prices
        epochs: Maximum training epochs
        error_threshold: Early-stop mean squared error
        min_training_examples: Fewer supervised examples than this is an error
        days_to_predict: Default forecast horizon
        learning_rate: Adam step size
        architecture: Layer specs; defaults to default_architecture(W + 6)
        seed: Seed for weight init and dropout (None = nondeterministic)
        indicator_backend: Moving-average backend ('ta' or 'pandas')
    """
    sequence_length: int = DEFAULT_SEQUENCE_LENGTH
    epochs: int = 2000
    error_threshold: float = 0.001
    min_training_examples: int = 10
    days_to_predict: int = 5
    learning_rate: float = 0.01
    architecture: Optional[List[LayerSpec]] = None
    seed: Optional[int] = None
    indicator_backend: str = "ta"

    def __post_init__(self):
        """Validate configuration parameters and resolve the default architecture."""
        if self.sequence_length <= 0:
            raise ValueError(f"sequence_length ({self.sequence_length}) must be positive")
        if self.epochs <= 0:
            raise ValueError(f"epochs ({self.epochs}) must be positive")
        if self.error_threshold < 0:
            raise ValueError(f"error_threshold ({self.error_threshold}) must be non-negative")
        if self.min_training_examples <= 0:
            raise ValueError(f"min_training_examples ({self.min_training_examples}) must be positive")
        if self.days_to_predict <= 0:
            raise ValueError(f"days_to_predict ({self.days_to_predict}) must be positive")
        if self.indicator_backend not in ("ta", "pandas"):
            raise ValueError(f"Unknown indicator_backend: {self.indicator_backend}")

        if self.architecture is None:
            self.architecture = default_architecture(self.input_dim)
        if len(self.architecture) < 2:
            raise ValueError("architecture needs an input layer and at least one more layer")
        if self.architecture[0].size != self.input_dim:
            raise ValueError(
                f"architecture input width ({self.architecture[0].size}) must equal "
                f"sequence_length + indicators ({self.input_dim})"
            )
        if self.architecture[-1].size != 1:
            raise ValueError(f"architecture must end in a single unit, got {self.architecture[-1].size}")

    @property
    def input_dim(self) -> int:
        return feature_width(self.sequence_length)

    def network_config(self) -> NetworkConfig:
        return NetworkConfig(
            architecture=list(self.architecture),
            learning_rate=self.learning_rate,
            seed=self.seed,
        )


def compose_config(path: Union[str, Path, None] = None,
                   overrides: Optional[Sequence[str]] = None) -> PredictorConfig:
    """
    Compose a PredictorConfig from defaults, an optional YAML file and overrides.

    Args:
        path: YAML file whose keys mirror PredictorConfig fields.
        overrides: Dotlist overrides, e.g. ["epochs=500", "seed=7"].

    Returns:
        A validated PredictorConfig.
    """
    cfg = OmegaConf.structured(PredictorConfig)
    if path is not None:
        cfg = OmegaConf.merge(cfg, OmegaConf.load(str(path)))
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
    return OmegaConf.to_object(cfg)


def save_config(cfg: PredictorConfig, path: Union[str, Path]) -> None:
    """
    Persist a configuration to YAML for reproducibility.

    Args:
        cfg: Config to write.
        path: Destination file path.
    """
    OmegaConf.save(OmegaConf.structured(cfg), str(path))
