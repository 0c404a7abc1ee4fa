"""Feed-forward network with backpropagation and an Adam optimizer (NumPy only).

Training is full batch: every epoch runs all examples through one forward
pass, averages the squared error, backpropagates once and takes one Adam
step. Row i of a layer's weight matrix is the weight vector of unit i.
"""
import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
from tqdm import tqdm

from stockbrain.errors import TrainingError
from stockbrain.models.types import LayerSpec, NetworkConfig, TrainingHistory

logger = logging.getLogger(__name__)

BN_EPS = 1e-8


class Layer:
    """Dense layer: weighted sum -> optional batch norm -> activation -> optional dropout.

    Args:
        input_dim: Width of the previous layer
        spec: Width, activation, batch norm flag and dropout rate
        rng: Generator used for weight init and dropout masks
        bn_momentum: Weight of the previous running statistic
    """

    def __init__(self, input_dim: int, spec: LayerSpec, rng: np.random.Generator, bn_momentum: float = 0.9):
        self.input_dim = input_dim
        self.size = spec.size
        self.activation = spec.kind
        self.batch_norm = spec.batch_norm
        self.dropout = spec.dropout
        self.bn_momentum = bn_momentum
        self._rng = rng

        # He for rectifiers, Xavier otherwise; uniform in [-scale, scale]
        if self.activation.uses_he_init:
            scale = np.sqrt(2.0 / input_dim)
        else:
            scale = np.sqrt(2.0 / (input_dim + spec.size))
        self.weights = rng.uniform(-scale, scale, size=(spec.size, input_dim))
        self.biases = np.zeros(spec.size)

        if self.batch_norm:
            self.gamma = np.ones(spec.size)
            self.beta = np.zeros(spec.size)
            self.running_mean = np.zeros(spec.size)
            self.running_var = np.ones(spec.size)
            self._bn_updates = 0

        self._cache: Dict[str, Optional[np.ndarray]] = {}

    def __len__(self) -> int:
        return self.size

    def params(self) -> Dict[str, np.ndarray]:
        """Trainable arrays by name (the live arrays, updated in place)."""
        params = {"weights": self.weights, "biases": self.biases}
        if self.batch_norm:
            params["gamma"] = self.gamma
            params["beta"] = self.beta
        return params

    def forward(self, inputs: np.ndarray, training: bool = False) -> np.ndarray:
        """
        Args:
            inputs: (batch, input_dim)
            training: Use batch statistics and dropout

        Returns:
            (batch, size) outputs
        """
        z = inputs @ self.weights.T + self.biases

        zhat = inv_std = None
        pre = z
        if self.batch_norm:
            if training:
                mean = z.mean(axis=0)
                var = z.var(axis=0)
                if self._bn_updates == 0:
                    self.running_mean = mean.copy()
                    self.running_var = var.copy()
                else:
                    m = self.bn_momentum
                    self.running_mean = m * self.running_mean + (1 - m) * mean
                    self.running_var = m * self.running_var + (1 - m) * var
                self._bn_updates += 1
            else:
                mean, var = self.running_mean, self.running_var
            inv_std = 1.0 / np.sqrt(var + BN_EPS)
            zhat = (z - mean) * inv_std
            pre = self.gamma * zhat + self.beta

        activated = self.activation.forward(pre)

        mask = None
        outputs = activated
        if training and self.dropout > 0:
            # inverted dropout: survivors are rescaled so inference needs no correction
            keep = self._rng.random(activated.shape) >= self.dropout
            mask = keep / (1.0 - self.dropout)
            outputs = activated * mask

        self._cache = {
            "inputs": inputs,
            "zhat": zhat,
            "inv_std": inv_std,
            "activated": activated,
            "mask": mask,
        }
        return outputs

    def backward(self, grad_outputs: np.ndarray) -> "tuple[Dict[str, np.ndarray], np.ndarray]":
        """
        Backpropagate through the last training forward pass.

        Args:
            grad_outputs: dLoss/dOutputs, (batch, size)

        Returns:
            (gradients keyed like params(), dLoss/dInputs)
        """
        cache = self._cache
        if not cache:
            raise RuntimeError("backward called before forward")

        grad = grad_outputs
        if cache["mask"] is not None:
            grad = grad * cache["mask"]
        delta = grad * self.activation.derivative(cache["activated"])

        grads: Dict[str, np.ndarray] = {}
        if self.batch_norm:
            zhat, inv_std = cache["zhat"], cache["inv_std"]
            n = delta.shape[0]
            grads["gamma"] = (delta * zhat).sum(axis=0)
            grads["beta"] = delta.sum(axis=0)
            dzhat = delta * self.gamma
            dz = (inv_std / n) * (n * dzhat - dzhat.sum(axis=0) - zhat * (dzhat * zhat).sum(axis=0))
        else:
            dz = delta

        grads["weights"] = dz.T @ cache["inputs"]
        grads["biases"] = dz.sum(axis=0)
        grad_inputs = dz @ self.weights
        return grads, grad_inputs


class AdamOptimizer:
    """Adam with per-parameter first/second moment estimates and a global step.

    Update: p -= lr * m_hat / (sqrt(v_hat) + eps), where m_hat and v_hat are
    bias-corrected by the step count.
    """

    def __init__(self, learning_rate: float = 0.01, beta1: float = 0.9, beta2: float = 0.999, epsilon: float = 1e-8):
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon
        self.t = 0
        self.m: Dict[tuple, np.ndarray] = {}
        self.v: Dict[tuple, np.ndarray] = {}

    def register(self, key: tuple, param: np.ndarray) -> None:
        self.m[key] = np.zeros_like(param)
        self.v[key] = np.zeros_like(param)

    def step(self, params: Dict[tuple, np.ndarray], grads: Dict[tuple, np.ndarray]) -> None:
        self.t += 1
        correction1 = 1.0 - self.beta1 ** self.t
        correction2 = 1.0 - self.beta2 ** self.t
        for key, param in params.items():
            g = grads[key]
            self.m[key] = self.beta1 * self.m[key] + (1.0 - self.beta1) * g
            self.v[key] = self.beta2 * self.v[key] + (1.0 - self.beta2) * g * g
            m_hat = self.m[key] / correction1
            v_hat = self.v[key] / correction2
            param -= self.learning_rate * m_hat / (np.sqrt(v_hat) + self.epsilon)


class NeuralNetwork:
    """Multi-layer perceptron trained with full-batch backpropagation and Adam.

    Args:
        config: Architecture and optimizer settings

    Attributes:
        layers: Layers after the input layer
        optimizer: Adam state for every trainable array
        training_error: Mean squared error of the last epoch run
        iterations: Epochs run by the last `train` call
        frozen: Set by `freeze()`; a frozen network only predicts
    """

    def __init__(self, config: Optional[NetworkConfig] = None):
        self.config = config or NetworkConfig()
        self._rng = np.random.default_rng(self.config.seed)

        self.layers: List[Layer] = []
        input_dim = self.config.input_dim
        for spec in self.config.architecture[1:]:
            self.layers.append(Layer(input_dim, spec, self._rng, bn_momentum=self.config.bn_momentum))
            input_dim = spec.size

        self.optimizer = AdamOptimizer(
            learning_rate=self.config.learning_rate,
            beta1=self.config.beta1,
            beta2=self.config.beta2,
            epsilon=self.config.epsilon,
        )
        for key, param in self._parameters().items():
            self.optimizer.register(key, param)

        self.training_error = float("nan")
        self.iterations = 0
        self.frozen = False

    @property
    def input_dim(self) -> int:
        return self.config.input_dim

    @property
    def output_dim(self) -> int:
        return self.config.output_dim

    def _parameters(self) -> Dict[tuple, np.ndarray]:
        return {
            (index, name): param
            for index, layer in enumerate(self.layers)
            for name, param in layer.params().items()
        }

    def forward(self, inputs: np.ndarray, training: bool = False) -> np.ndarray:
        """Run a (batch, input_dim) array through every layer.

        Raises:
            RuntimeError: If training=True on a frozen network
        """
        if training and self.frozen:
            raise RuntimeError("Network is frozen; training-mode forward passes are not allowed")
        outputs = np.atleast_2d(np.asarray(inputs, dtype=float))
        if outputs.shape[1] != self.input_dim:
            raise ValueError(f"Expected input width {self.input_dim}, got {outputs.shape[1]}")
        for layer in self.layers:
            outputs = layer.forward(outputs, training=training)
        return outputs

    def predict(self, input_vector: Sequence[float]) -> np.ndarray:
        """Inference-mode forward pass for a single feature vector."""
        return self.forward(np.asarray(input_vector, dtype=float).reshape(1, -1), training=False)[0]

    def _backward(self, grad_outputs: np.ndarray) -> Dict[tuple, np.ndarray]:
        grads: Dict[tuple, np.ndarray] = {}
        grad = grad_outputs
        for index in reversed(range(len(self.layers))):
            layer_grads, grad = self.layers[index].backward(grad)
            for name, value in layer_grads.items():
                grads[(index, name)] = value
        return grads

    def train(self,
              examples: Sequence,
              epochs: int = 1000,
              error_threshold: float = 0.001,
              progress: bool = False) -> TrainingHistory:
        """
        Fit the network to (features, target) examples.

        Args:
            examples: Non-empty sequence of TrainingExample-like pairs
            epochs: Maximum number of epochs
            error_threshold: Stop once an epoch's mean squared error is below this
            progress: Show a tqdm progress bar

        Returns:
            TrainingHistory with per-epoch errors and epochs run

        Raises:
            ValueError: If examples is empty or widths do not match
            TrainingError: If a non-finite error or gradient appears
        """
        if self.frozen:
            raise RuntimeError("Network is frozen; construct a new one to retrain")
        if not examples:
            raise ValueError("Cannot train on an empty example set")
        if epochs < 1:
            raise ValueError(f"epochs ({epochs}) must be >= 1")

        inputs = np.vstack([np.asarray(features, dtype=float) for features, _ in examples])
        targets = np.vstack([np.atleast_1d(np.asarray(target, dtype=float)) for _, target in examples])
        if inputs.shape[1] != self.input_dim:
            raise ValueError(f"Expected input width {self.input_dim}, got {inputs.shape[1]}")
        if targets.shape[1] != self.output_dim:
            raise ValueError(f"Expected target width {self.output_dim}, got {targets.shape[1]}")
        if not (np.isfinite(inputs).all() and np.isfinite(targets).all()):
            raise TrainingError("Non-finite values in training examples")

        errors: List[float] = []
        converged = False
        for epoch in tqdm(range(epochs), desc="Train", leave=False, disable=not progress):
            outputs = self.forward(inputs, training=True)
            residuals = outputs - targets
            error = float(np.mean(residuals ** 2))
            if not np.isfinite(error):
                raise TrainingError(f"Non-finite training error at epoch {epoch + 1}")
            errors.append(error)

            if error < error_threshold:
                converged = True
                break

            grads = self._backward(2.0 * residuals / residuals.size)
            if not all(np.isfinite(g).all() for g in grads.values()):
                raise TrainingError(f"Non-finite gradient at epoch {epoch + 1}")
            self.optimizer.step(self._parameters(), grads)

            if (epoch + 1) % 100 == 0:
                logger.debug("epoch %d: mse=%.6f", epoch + 1, error)

        self.training_error = errors[-1]
        self.iterations = len(errors)
        return TrainingHistory(errors=errors, iterations=len(errors), converged=converged)

    def freeze(self) -> "NeuralNetwork":
        """Mark the network inference-only."""
        self.frozen = True
        return self
