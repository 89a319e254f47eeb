"""
Visualizer Module
=================

Turning network state into something to look at.

Classes:
    VisualizationGraph  - Neuron/connection projection of a network (no pygame)
    NeuralNetVisualizer - Draws a VisualizationGraph with pygame
    Dashboard           - Loss chart and metric cards

The pygame classes are imported lazily so headless users of the graph
builder never need a display.
"""

from .graph import (
    ConnectionView,
    NeuronView,
    VisualizationGraph,
    build_visualization_graph,
    calculate_total_connections,
    format_summary,
    summarize_network,
)

__all__ = [
    'ConnectionView',
    'NeuronView',
    'VisualizationGraph',
    'build_visualization_graph',
    'calculate_total_connections',
    'format_summary',
    'summarize_network',
    'NeuralNetVisualizer',
    'Dashboard',
]


def __getattr__(name):
    if name == 'NeuralNetVisualizer':
        from .nn_visualizer import NeuralNetVisualizer
        return NeuralNetVisualizer
    if name == 'Dashboard':
        from .dashboard import Dashboard
        return Dashboard
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
