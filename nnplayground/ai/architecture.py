"""
Network Architecture
====================

LayerConfig lists describe a network from input to output:

    [LayerConfig(2, 'linear', 'input'),
     LayerConfig(4, 'relu',   'hidden'),
     LayerConfig(1, 'sigmoid','output')]

Rules (checked by validate_architecture):
    - at least 2 entries
    - first entry is the only 'input', last entry is the only 'output'
    - everything in between is 'hidden'
    - neuron counts are positive integers
    - activations are one of linear, sigmoid, relu, tanh

The editing helpers never mutate their argument: they return a new,
validated list. A live NetworkModel is replaced wholesale with the result.
"""

from dataclasses import dataclass, replace, asdict
from typing import Any, Dict, List, Optional, Sequence

from .activations import ACTIVATIONS
from .errors import ConfigError

INPUT = 'input'
HIDDEN = 'hidden'
OUTPUT = 'output'
ROLES = (INPUT, HIDDEN, OUTPUT)


@dataclass(frozen=True)
class LayerConfig:
    """One layer of the architecture."""
    neurons: int
    activation: str = 'relu'
    role: str = HIDDEN

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayerConfig':
        # 'type' is accepted as an alias of 'role'
        return cls(
            neurons=data['neurons'],
            activation=data.get('activation', 'relu'),
            role=data.get('role', data.get('type', HIDDEN)),
        )


def validate_architecture(configs: Sequence[LayerConfig]) -> List[LayerConfig]:
    """
    Check every architecture rule.

    Returns:
        The configs as a new list

    Raises:
        ConfigError: On the first rule that is broken
    """
    configs = list(configs)
    if len(configs) < 2:
        raise ConfigError(
            f"A network needs at least an input and an output layer, got {len(configs)} layer(s)"
        )

    last = len(configs) - 1
    for i, layer in enumerate(configs):
        if not isinstance(layer, LayerConfig):
            raise ConfigError(f"Layer {i} is not a LayerConfig: {layer!r}")

        expected = INPUT if i == 0 else OUTPUT if i == last else HIDDEN
        if layer.role != expected:
            raise ConfigError(f"Layer {i} must have role '{expected}', got '{layer.role}'")

        if isinstance(layer.neurons, bool) or not isinstance(layer.neurons, int) or layer.neurons <= 0:
            raise ConfigError(f"Layer {i} must have a positive neuron count, got {layer.neurons!r}")

        if layer.activation not in ACTIVATIONS:
            raise ConfigError(
                f"Layer {i} has unknown activation '{layer.activation}'. "
                f"Available: {', '.join(ACTIVATIONS)}"
            )

    return configs


def build_architecture(
    input_size: int,
    hidden: Sequence[tuple],
    output_size: int,
    output_activation: str = 'sigmoid',
    input_activation: str = 'linear',
) -> List[LayerConfig]:
    """
    Build a validated architecture from plain sizes.

    Args:
        input_size: Input neurons
        hidden: (neurons, activation) pairs, input side first
        output_size: Output neurons
        output_activation: Activation of the output layer
        input_activation: Display activation of the input layer
    """
    configs = [LayerConfig(input_size, input_activation, INPUT)]
    configs += [LayerConfig(n, act, HIDDEN) for n, act in hidden]
    configs.append(LayerConfig(output_size, output_activation, OUTPUT))
    return validate_architecture(configs)


def default_architecture(config=None) -> List[LayerConfig]:
    """[2 linear input] -> [4 relu] -> [1 sigmoid output] unless config says otherwise."""
    if config is None:
        return build_architecture(2, [(4, 'relu')], 1)
    return build_architecture(
        config.INPUT_SIZE,
        config.HIDDEN_LAYERS,
        config.OUTPUT_SIZE,
        output_activation=config.OUTPUT_ACTIVATION,
        input_activation=config.INPUT_ACTIVATION,
    )


def add_hidden_layer(
    configs: Sequence[LayerConfig],
    neurons: int = 4,
    activation: str = 'relu',
) -> List[LayerConfig]:
    """Insert a hidden layer just before the output layer."""
    configs = validate_architecture(configs)
    configs.insert(len(configs) - 1, LayerConfig(neurons, activation, HIDDEN))
    return validate_architecture(configs)


def remove_hidden_layer(configs: Sequence[LayerConfig], index: int) -> List[LayerConfig]:
    """Remove the hidden layer at index. The input and output layers cannot be removed."""
    configs = validate_architecture(configs)
    _check_index(configs, index)
    if configs[index].role != HIDDEN:
        raise ConfigError(f"Cannot remove the {configs[index].role} layer")
    del configs[index]
    return validate_architecture(configs)


def set_neurons(configs: Sequence[LayerConfig], index: int, neurons: int) -> List[LayerConfig]:
    """Change a layer's neuron count (values below 1 are raised to 1)."""
    configs = validate_architecture(configs)
    _check_index(configs, index)
    if configs[index].role == INPUT:
        raise ConfigError("The input layer's neuron count is fixed by the dataset")
    configs[index] = replace(configs[index], neurons=max(1, int(neurons)))
    return validate_architecture(configs)


def set_activation(configs: Sequence[LayerConfig], index: int, activation: str) -> List[LayerConfig]:
    """Change a layer's activation function."""
    configs = validate_architecture(configs)
    _check_index(configs, index)
    if configs[index].role == INPUT:
        raise ConfigError("The input layer's activation cannot be changed")
    configs[index] = replace(configs[index], activation=activation)
    return validate_architecture(configs)


def parse_architecture(
    text: str,
    input_activation: str = 'linear',
    default_activation: str = 'relu',
    output_activation: Optional[str] = None,
) -> List[LayerConfig]:
    """
    Parse a compact architecture string such as "2,4:relu,3:tanh,1:sigmoid".

    Each comma-separated item is NEURONS[:ACTIVATION]. The first item is the
    input layer, the last one the output layer.

    Raises:
        ConfigError: On malformed items or broken architecture rules
    """
    items = [item.strip() for item in text.split(',') if item.strip()]
    configs = []
    for i, item in enumerate(items):
        neurons_text, _, activation = item.partition(':')
        try:
            neurons = int(neurons_text)
        except ValueError:
            raise ConfigError(f"Invalid neuron count '{neurons_text}' in '{item}'") from None

        if i == 0:
            role = INPUT
            activation = activation or input_activation
        elif i == len(items) - 1:
            role = OUTPUT
            activation = activation or output_activation or 'sigmoid'
        else:
            role = HIDDEN
            activation = activation or default_activation

        configs.append(LayerConfig(neurons, activation.lower(), role))

    return validate_architecture(configs)


def format_architecture(configs: Sequence[LayerConfig]) -> str:
    """Inverse of parse_architecture, e.g. '2:linear,4:relu,1:sigmoid'."""
    return ','.join(f"{layer.neurons}:{layer.activation}" for layer in configs)


def layer_sizes(configs: Sequence[LayerConfig]) -> List[int]:
    return [layer.neurons for layer in configs]


def _check_index(configs: Sequence[LayerConfig], index: int) -> None:
    if not 0 <= index < len(configs):
        raise ConfigError(f"Layer index {index} out of range for {len(configs)} layers")
