"""
AI Module
=========

The training/inference engine.

Classes:
    NetworkModel       - Dense network trained full-batch with Adam
    DenseLayer         - Fully-connected layer with manual backprop
    AdamOptimizer      - Adam update rule with a shared step counter
    LayerConfig        - One entry of an architecture
    TrainingController - Step/continuous scheduling and metrics history
    TrainingMetrics    - Loss and accuracy of one step
"""

from .errors import ConfigError, DisposedError
from .architecture import LayerConfig, default_architecture, validate_architecture
from .layers import DenseLayer
from .optimizer import AdamOptimizer
from .metrics import TrainingMetrics, MetricsHistory
from .network import NetworkModel
from .trainer import TrainingController, CancellationToken, IntervalTicker

__all__ = [
    'ConfigError',
    'DisposedError',
    'LayerConfig',
    'default_architecture',
    'validate_architecture',
    'DenseLayer',
    'AdamOptimizer',
    'TrainingMetrics',
    'MetricsHistory',
    'NetworkModel',
    'TrainingController',
    'CancellationToken',
    'IntervalTicker',
]
