"""
Configuration file for the Neural Network Playground
=====================================================

All architecture defaults, optimizer constants, dataset settings and
visualization options are centralized here.
Modify these values to experiment with different training setups.

Usage:
    from config import Config
    cfg = Config()
    print(cfg.LEARNING_RATE)
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Optional
import torch


@dataclass
class Config:
    """
    Central configuration for the entire project.

    Sections:
    1. Network - Default architecture
    2. Optimizer - Adam constants
    3. Datasets - Synthetic data generation
    4. Metrics - Accuracy policy and history
    5. Scheduling - Continuous training rate
    6. Visualization - Display options
    7. System - Hardware, seeds and paths
    """

    # =========================================================================
    # NETWORK ARCHITECTURE
    # =========================================================================

    # Input and output widths of every built-in dataset
    INPUT_SIZE: int = 2
    OUTPUT_SIZE: int = 1

    # Default hidden layers as (neurons, activation) pairs
    # [2] -> [4, relu] -> [1, sigmoid] is enough to solve XOR
    HIDDEN_LAYERS: List[Tuple[int, str]] = field(default_factory=lambda: [(4, 'relu')])

    # Activation of the input layer (display only, the input has no weights)
    INPUT_ACTIVATION: str = 'linear'

    # Output activation: sigmoid keeps predictions in [0, 1] for binary labels
    OUTPUT_ACTIVATION: str = 'sigmoid'

    # Layer added by "add hidden layer" edits
    NEW_LAYER_NEURONS: int = 4
    NEW_LAYER_ACTIVATION: str = 'relu'

    # =========================================================================
    # OPTIMIZER (Adam)
    # =========================================================================

    # Fixed constants of the training engine
    # Larger learning rates make the loss curve jumpy on the spiral dataset
    LEARNING_RATE: float = 0.01
    ADAM_BETA1: float = 0.9
    ADAM_BETA2: float = 0.999
    ADAM_EPSILON: float = 1e-8

    # =========================================================================
    # DATASETS
    # =========================================================================

    # Dataset loaded when a network is (re)initialized
    DEFAULT_DATASET: str = 'xor'

    # Number of points for the sampled datasets (xor always has 4, spiral needs an even count)
    # Kept small: every training step is full-batch
    DATASET_POINTS: int = 100

    # Standard deviation of the noise added to the sine targets
    SINE_NOISE: float = 0.05

    # Number of turns of each spiral arm
    SPIRAL_TURNS: int = 2

    # =========================================================================
    # METRICS
    # =========================================================================

    # Predictions >= threshold count as class 1 (single-output classification)
    CLASSIFICATION_THRESHOLD: float = 0.5

    # A regression sample is "correct" when within this distance of its target
    REGRESSION_TOLERANCE: float = 0.1

    # Maximum number of steps kept in the metrics history
    METRICS_HISTORY_LENGTH: int = 1000

    # =========================================================================
    # SCHEDULING
    # =========================================================================

    # Minimum wall-clock seconds between continuous training steps
    # 0.1 keeps the visualization readable (at most 10 steps/sec)
    STEP_INTERVAL: float = 0.1

    # Log metrics every N steps
    LOG_EVERY: int = 50

    # =========================================================================
    # VISUALIZATION SETTINGS
    # =========================================================================

    SCREEN_WIDTH: int = 1000
    SCREEN_HEIGHT: int = 700
    FPS: int = 60

    # Area reserved for the network graph (left side of the window)
    GRAPH_WIDTH: int = 640
    GRAPH_HEIGHT: int = 460

    # Colors (RGB tuples)
    COLOR_BACKGROUND: Tuple[int, int, int] = (15, 15, 35)
    COLOR_TEXT: Tuple[int, int, int] = (255, 255, 255)

    # Neural network visualizer
    VIS_NEURON_RADIUS: int = 14
    VIS_MAX_WEIGHT_WIDTH: int = 5

    # Activation coloring
    VIS_COLOR_INACTIVE: Tuple[int, int, int] = (50, 50, 50)
    VIS_COLOR_ACTIVE: Tuple[int, int, int] = (0, 255, 128)
    VIS_COLOR_WEIGHT_POS: Tuple[int, int, int] = (66, 135, 245)
    VIS_COLOR_WEIGHT_NEG: Tuple[int, int, int] = (245, 66, 66)

    # Dashboard
    PLOT_HISTORY_LENGTH: int = 200  # Number of steps to show in the loss chart

    # =========================================================================
    # SYSTEM SETTINGS
    # =========================================================================

    # Force CPU device (the networks here are tiny, transfers would dominate)
    FORCE_CPU: bool = True

    # Device selection
    @property
    def DEVICE(self) -> torch.device:
        """Auto-detect CUDA/MPS/CPU, or force CPU if configured."""
        if self.FORCE_CPU:
            return torch.device('cpu')
        if torch.cuda.is_available():
            return torch.device('cuda')
        elif hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
            return torch.device('mps')
        return torch.device('cpu')

    # Paths
    LOG_DIR: str = 'logs'

    # Random seed for reproducibility (None for random)
    SEED: Optional[int] = None

    def __post_init__(self):
        """Validation and derived calculations."""
        assert self.INPUT_SIZE > 0, "Input size must be positive"
        assert self.OUTPUT_SIZE > 0, "Output size must be positive"
        assert all(n > 0 for n, _ in self.HIDDEN_LAYERS), "Hidden layer sizes must be positive"
        assert self.LEARNING_RATE > 0, "Learning rate must be positive"
        assert 0 <= self.ADAM_BETA1 < 1, "Beta1 must be in [0, 1)"
        assert 0 <= self.ADAM_BETA2 < 1, "Beta2 must be in [0, 1)"
        assert self.ADAM_EPSILON > 0, "Epsilon must be positive"
        assert self.DATASET_POINTS > 0, "Dataset must have at least one point"
        assert self.SINE_NOISE >= 0, "Sine noise must be non-negative"
        assert self.SPIRAL_TURNS > 0, "Spiral needs at least one turn"
        assert 0 < self.CLASSIFICATION_THRESHOLD < 1, "Threshold must be in (0, 1)"
        assert self.REGRESSION_TOLERANCE > 0, "Regression tolerance must be positive"
        assert self.STEP_INTERVAL >= 0, "Step interval must be non-negative"
        assert self.METRICS_HISTORY_LENGTH > 0, "History length must be positive"
        assert self.SCREEN_WIDTH > 0 and self.SCREEN_HEIGHT > 0, "Screen size must be positive"


# Global config instance for easy importing
config = Config()


if __name__ == "__main__":
    # Print configuration summary
    cfg = Config()
    print("=" * 60)
    print("Neural Network Playground - Configuration Summary")
    print("=" * 60)
    print(f"\nNetwork:")
    print(f"   Input size: {cfg.INPUT_SIZE}")
    print(f"   Hidden layers: {cfg.HIDDEN_LAYERS}")
    print(f"   Output: {cfg.OUTPUT_SIZE} ({cfg.OUTPUT_ACTIVATION})")
    print(f"\nOptimizer (Adam):")
    print(f"   Learning rate: {cfg.LEARNING_RATE}")
    print(f"   Betas: ({cfg.ADAM_BETA1}, {cfg.ADAM_BETA2})")
    print(f"\nData:")
    print(f"   Default dataset: {cfg.DEFAULT_DATASET}")
    print(f"   Points: {cfg.DATASET_POINTS}")
    print(f"\nDevice: {cfg.DEVICE}")
    print("=" * 60)
