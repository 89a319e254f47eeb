"""
Network Model
=============

The training/inference engine: an ordered stack of DenseLayers trained
full-batch with Adam on mean squared error.

    Input (no weights) -> Dense -> Dense -> ... -> Dense (output)

A network with L LayerConfigs has L-1 DenseLayers, because the input
"layer" only forwards the raw sample.

Each train_step():
    1. Forward pass over every sample of the active dataset
    2. MSE loss/accuracy and dL/dpred averaged over the batch
    3. Backward pass through the layers, output side first
    4. One Adam update of every weight and bias
    5. Forward pass of the first sample only, cached for visualization

Key Features:
    - Explicitly owned state: every model has its own random generator,
      layers and optimizer (no process-wide engine)
    - Snapshots are deep copies, decoupled from the live parameters
    - Training before initialization returns zero metrics instead of failing
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import torch

from config import Config
from .activations import get_activation
from .architecture import LayerConfig, default_architecture, format_architecture, validate_architecture
from .errors import DisposedError
from .layers import DenseLayer
from .losses import accuracy, mse_gradient, mse_loss
from .metrics import TrainingMetrics
from .optimizer import AdamOptimizer
from ..data import TrainingData, generate_dataset
from ..utils.logger import get_logger, log_network_event

logger = get_logger(__name__)


class NetworkModel:
    """
    Feed-forward network with manual backpropagation.

    Attributes:
        config (Config): Configuration object
        seed (Optional[int]): Seed of the weight and dataset generators

    Example:
        >>> model = NetworkModel(seed=0)
        >>> model.initialize(default_architecture())
        >>> metrics = model.train_step()
        >>> metrics.loss, metrics.accuracy
    """

    def __init__(self, config: Optional[Config] = None, seed: Optional[int] = None):
        """
        Create an empty model. Call initialize() before training.

        Args:
            config: Configuration object
            seed: Seed for weight initialization and generated datasets
                  (default: config.SEED, None for fresh randomness)
        """
        self.config = config or Config()
        self.seed = seed if seed is not None else self.config.SEED
        self.device = self.config.DEVICE
        self.dtype = torch.float32

        self._generator = torch.Generator()
        if self.seed is not None:
            self._generator.manual_seed(self.seed)
        else:
            self._generator.seed()

        self._optimizer = AdamOptimizer(
            learning_rate=self.config.LEARNING_RATE,
            beta1=self.config.ADAM_BETA1,
            beta2=self.config.ADAM_BETA2,
            epsilon=self.config.ADAM_EPSILON,
        )

        self._configs: List[LayerConfig] = []
        self._layers: List[DenseLayer] = []
        self._dataset: Optional[TrainingData] = None
        self._inputs: Optional[torch.Tensor] = None
        self._targets: Optional[torch.Tensor] = None
        self._last_activations: List[List[float]] = []
        self._steps = 0
        self._disposed = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self, configs: Optional[Sequence[LayerConfig]] = None) -> None:
        """
        Build the layers for an architecture and load the default dataset.

        Args:
            configs: LayerConfig list (default: the config's default architecture)

        Raises:
            ConfigError: If the architecture breaks a rule
            DisposedError: If the model was disposed
        """
        self._check_alive('initialize')
        if configs is None:
            configs = default_architecture(self.config)
        configs = validate_architecture(configs)

        self._release_layers()
        self._configs = configs
        for prev, layer in zip(configs[:-1], configs[1:]):
            self._layers.append(DenseLayer(
                prev.neurons,
                layer.neurons,
                activation=layer.activation,
                generator=self._generator,
                device=self.device,
                dtype=self.dtype,
            ))

        self._optimizer.reset()
        self._steps = 0
        self._last_activations = []

        log_network_event(
            'configure',
            layers=format_architecture(configs),
            parameters=self.count_parameters(),
        )

        self.load_dataset(self.config.DEFAULT_DATASET)

    def load_dataset(self, data: Union[TrainingData, str]) -> None:
        """
        Replace the active dataset. Weights are not touched.

        Args:
            data: A TrainingData, or the name of a registered dataset
        """
        self._check_alive('load_dataset')
        if isinstance(data, str):
            data = generate_dataset(
                data,
                self.config.DATASET_POINTS,
                self.seed,
                noise=self.config.SINE_NOISE,
                turns=self.config.SPIRAL_TURNS,
            )

        self._dataset = data
        self._inputs = torch.as_tensor(data.inputs, dtype=self.dtype, device=self.device)
        self._targets = torch.as_tensor(data.outputs, dtype=self.dtype, device=self.device)

        log_network_event('dataset', name=data.name, samples=len(data), task=data.task)

    def reset(self) -> None:
        """
        Re-draw every weight, clear the optimizer state, the step counter and
        the cached activations. Architecture and dataset stay as they are.
        """
        self._check_alive('reset')
        if not self._layers:
            logger.debug("reset() on an uninitialized model, nothing to do")
            return

        for layer in self._layers:
            layer.reset_parameters(self._generator)
        self._optimizer.reset()
        self._steps = 0
        self._last_activations = []

        log_network_event('reset', layers=format_architecture(self._configs))

    def dispose(self) -> None:
        """Release every buffer. The model is unusable afterwards."""
        if self._disposed:
            return
        self._release_layers()
        self._dataset = None
        self._inputs = None
        self._targets = None
        self._last_activations = []
        self._disposed = True
        log_network_event('dispose')

    # =========================================================================
    # TRAINING
    # =========================================================================

    def train_step(self) -> TrainingMetrics:
        """
        One full-batch gradient update over the active dataset.

        Returns:
            Loss and accuracy of the batch (measured before the update),
            or zero metrics if the model is not ready to train
        """
        reason = self._not_ready_reason()
        if reason is not None:
            logger.debug(f"train_step skipped: {reason}")
            return TrainingMetrics.zero()

        assert self._inputs is not None and self._targets is not None
        assert self._dataset is not None

        predictions = self._forward(self._inputs, cache=True)

        loss = mse_loss(predictions, self._targets)
        acc = accuracy(
            predictions,
            self._targets,
            task=self._dataset.task,
            threshold=self.config.CLASSIFICATION_THRESHOLD,
            tolerance=self.config.REGRESSION_TOLERANCE,
        )

        grad = mse_gradient(predictions, self._targets)
        for layer in reversed(self._layers):
            grad = layer.backward(grad)

        self._optimizer.step(slot for layer in self._layers for slot in layer.parameters())
        self._steps += 1

        self._update_activations()
        return TrainingMetrics(loss=loss, accuracy=acc)

    def predict(self, inputs: Union[np.ndarray, Sequence[Sequence[float]], torch.Tensor]) -> np.ndarray:
        """
        Forward pass without touching any cache.

        Args:
            inputs: (batch, input_size) or (input_size,)

        Returns:
            Network outputs as a numpy array of matching rank
        """
        self._check_alive('predict')
        if not self._layers:
            raise RuntimeError("Model is not initialized. Call initialize() first.")
        x = torch.as_tensor(np.asarray(inputs, dtype=np.float32), device=self.device)
        return self._forward(x, cache=False).cpu().numpy()

    def _forward(self, x: torch.Tensor, cache: bool) -> torch.Tensor:
        for layer in self._layers:
            x = layer.forward(x, cache=cache)
        return x

    def _update_activations(self) -> None:
        """Cache layer-by-layer activations of the first sample."""
        assert self._inputs is not None
        sample = self._inputs[0]
        activations = [sample.cpu().tolist()]
        h = sample
        for layer in self._layers:
            h = layer.forward(h, cache=False)
            activations.append(h.cpu().tolist())
        self._last_activations = activations

    def _not_ready_reason(self) -> Optional[str]:
        if self._disposed:
            return "model is disposed"
        if not self._layers:
            return "model is not initialized"
        if self._dataset is None or self._inputs is None or len(self._dataset) == 0:
            return "no dataset loaded"
        if self._dataset.input_size != self.input_size:
            logger.warning(
                f"Dataset '{self._dataset.name}' has {self._dataset.input_size} inputs "
                f"but the network expects {self.input_size}"
            )
            return "input width mismatch"
        if self._dataset.output_size != self.output_size:
            logger.warning(
                f"Dataset '{self._dataset.name}' has {self._dataset.output_size} outputs "
                f"but the network produces {self.output_size}"
            )
            return "output width mismatch"
        return None

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def get_weights(self) -> List[Dict[str, np.ndarray]]:
        """
        Deep copy of every layer's parameters.

        Returns:
            One {'weights': (in, out) array, 'biases': (out,) array} per DenseLayer
        """
        self._check_alive('get_weights')
        return [
            {
                'weights': layer.weights.detach().cpu().numpy().copy(),
                'biases': layer.biases.detach().cpu().numpy().copy(),
            }
            for layer in self._layers
        ]

    def get_activations(self) -> List[List[float]]:
        """
        Activations of the representative sample, input first.

        Falls back to get_empty_activations() until the first train_step().
        """
        self._check_alive('get_activations')
        if not self._last_activations:
            return self.get_empty_activations()
        return [list(values) for values in self._last_activations]

    def get_empty_activations(self) -> List[List[float]]:
        """One zero vector per layer, sized to that layer's neuron count."""
        self._check_alive('get_empty_activations')
        return [[0.0] * layer.neurons for layer in self._configs]

    def get_layer_info(self) -> List[Dict[str, Any]]:
        """
        Get information about each layer for visualization.

        Returns:
            List of dicts with layer metadata
        """
        info = []
        hidden = 0
        for layer in self._configs:
            if layer.role == 'input':
                name = 'Input'
            elif layer.role == 'output':
                name = 'Output'
            else:
                hidden += 1
                name = f'Hidden {hidden}'
            info.append({
                'name': name,
                'neurons': layer.neurons,
                'type': layer.role,
                'activation': get_activation(layer.activation).name,
            })
        return info

    def count_parameters(self) -> int:
        """Return total number of trainable parameters."""
        return sum(layer.count_parameters() for layer in self._layers)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def layer_configs(self) -> List[LayerConfig]:
        return list(self._configs)

    @property
    def layers(self) -> tuple:
        return tuple(self._layers)

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def dataset(self) -> Optional[TrainingData]:
        return self._dataset

    @property
    def input_size(self) -> int:
        return self._configs[0].neurons if self._configs else 0

    @property
    def output_size(self) -> int:
        return self._configs[-1].neurons if self._configs else 0

    @property
    def is_initialized(self) -> bool:
        return bool(self._layers)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _check_alive(self, operation: str) -> None:
        if self._disposed:
            raise DisposedError(operation)

    def _release_layers(self) -> None:
        for layer in self._layers:
            layer.release()
        self._layers = []
        self._configs = []

    def __repr__(self) -> str:
        if self._disposed:
            return "NetworkModel(disposed)"
        arch = format_architecture(self._configs) if self._configs else 'uninitialized'
        return f"NetworkModel({arch}, steps={self._steps})"
