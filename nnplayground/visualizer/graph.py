"""
Visualization Graph
===================

Turns layer configs + a weight snapshot + an activation snapshot into a
plain neuron/connection graph with layout coordinates.

Layout (L layers, layer i has k neurons):
    x(layer i)  = width  / (L + 1) * (i + 1)
    y(neuron j) = height / (k + 1) * (j + 1)

Every neuron of layer i connects to every neuron of layer i + 1. The weight
of source s -> target t is weights[i]['weights'][s][t]; anything missing from
the snapshots (e.g. while the network is being reconfigured) reads as 0.

The builder is a pure function: the same inputs always give the same graph,
and the graph holds no reference back to the model.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence

from ..ai.architecture import LayerConfig


@dataclass(frozen=True)
class NeuronView:
    """One neuron, positioned for drawing."""
    id: str
    layer_index: int
    neuron_index: int
    x: float
    y: float
    activation: float
    activation_function: str
    layer_role: str


@dataclass(frozen=True)
class ConnectionView:
    """One weighted edge between neurons of adjacent layers."""
    id: str
    source_id: str
    target_id: str
    weight: float


@dataclass
class VisualizationGraph:
    """Read-only projection of a network's topology, weights and activations."""
    neurons: List[NeuronView] = field(default_factory=list)
    connections: List[ConnectionView] = field(default_factory=list)

    def neuron(self, neuron_id: str) -> Optional[NeuronView]:
        for neuron in self.neurons:
            if neuron.id == neuron_id:
                return neuron
        return None

    def layer(self, layer_index: int) -> List[NeuronView]:
        return [n for n in self.neurons if n.layer_index == layer_index]

    @property
    def num_layers(self) -> int:
        return len({n.layer_index for n in self.neurons})

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """JSON-friendly form with camelCase keys."""
        return {
            'neurons': [_camel(asdict(n)) for n in self.neurons],
            'connections': [_camel(asdict(c)) for c in self.connections],
        }


def neuron_id(layer_index: int, neuron_index: int) -> str:
    return f"L{layer_index}N{neuron_index}"


def build_visualization_graph(
    configs: Sequence[LayerConfig],
    weights: Optional[Sequence[Dict[str, Any]]] = None,
    activations: Optional[Sequence[Sequence[float]]] = None,
    width: float = 800.0,
    height: float = 500.0,
) -> VisualizationGraph:
    """
    Build the graph for one snapshot.

    Args:
        configs: Layer configs, input first
        weights: Output of NetworkModel.get_weights() (may be partial or empty)
        activations: Output of NetworkModel.get_activations() (may be partial or empty)
        width: Width of the drawing area
        height: Height of the drawing area

    Returns:
        A fresh VisualizationGraph
    """
    weights = weights or []
    activations = activations or []
    layer_spacing = width / (len(configs) + 1)

    neurons: List[NeuronView] = []
    for layer_index, layer in enumerate(configs):
        neuron_spacing = height / (layer.neurons + 1)
        layer_acts = activations[layer_index] if layer_index < len(activations) else []
        for j in range(layer.neurons):
            neurons.append(NeuronView(
                id=neuron_id(layer_index, j),
                layer_index=layer_index,
                neuron_index=j,
                x=layer_spacing * (layer_index + 1),
                y=neuron_spacing * (j + 1),
                activation=_read(layer_acts, j),
                activation_function=layer.activation,
                layer_role=layer.role,
            ))

    connections: List[ConnectionView] = []
    for layer_index in range(len(configs) - 1):
        matrix = _weight_matrix(weights, layer_index)
        for s in range(configs[layer_index].neurons):
            row = matrix[s] if s < len(matrix) else []
            source = neuron_id(layer_index, s)
            for t in range(configs[layer_index + 1].neurons):
                target = neuron_id(layer_index + 1, t)
                connections.append(ConnectionView(
                    id=f"{source}-{target}",
                    source_id=source,
                    target_id=target,
                    weight=_read(row, t),
                ))

    return VisualizationGraph(neurons=neurons, connections=connections)


def calculate_total_connections(configs: Sequence[LayerConfig]) -> int:
    """Sum of n_i * n_(i+1) over adjacent layers, e.g. [2, 4, 1] -> 12."""
    return sum(a.neurons * b.neurons for a, b in zip(configs[:-1], configs[1:]))


def summarize_network(configs: Sequence[LayerConfig]) -> Dict[str, int]:
    """Layer, neuron, connection and parameter counts of an architecture."""
    connections = calculate_total_connections(configs)
    biases = sum(layer.neurons for layer in configs[1:])
    return {
        'layers': len(configs),
        'neurons': sum(layer.neurons for layer in configs),
        'connections': connections,
        'parameters': connections + biases,
    }


def format_summary(configs: Sequence[LayerConfig]) -> str:
    """e.g. '3 layers | 7 neurons | 12 connections'."""
    summary = summarize_network(configs)
    return (f"{summary['layers']} layers | {summary['neurons']} neurons | "
            f"{summary['connections']} connections")


def _weight_matrix(weights: Sequence[Dict[str, Any]], layer_index: int) -> Sequence:
    if layer_index >= len(weights) or not weights[layer_index]:
        return []
    matrix = weights[layer_index].get('weights')
    return [] if matrix is None else matrix


def _read(values: Sequence, index: int) -> float:
    """values[index] as a float, 0.0 when missing or not a finite number."""
    if index >= len(values):
        return 0.0
    try:
        value = float(values[index])
    except (TypeError, ValueError):
        return 0.0
    if value != value or value in (float('inf'), float('-inf')):
        return 0.0
    return value


def _camel(data: Dict[str, Any]) -> Dict[str, Any]:
    out = {}
    for key, value in data.items():
        head, *rest = key.split('_')
        out[head + ''.join(part.title() for part in rest)] = value
    return out
