"""
Training Metrics
================

TrainingMetrics is the record produced by one training step.
MetricsHistory collects those records for charts and summaries.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np


@dataclass(frozen=True)
class TrainingMetrics:
    """Batch-averaged result of one training step."""
    loss: float
    accuracy: float

    @classmethod
    def zero(cls) -> 'TrainingMetrics':
        """Value reported while the model is not ready to train."""
        return cls(loss=0.0, accuracy=0.0)


class MetricsHistory:
    """
    Tracks and stores training metrics over time.

    Metrics tracked:
        - Loss per step
        - Accuracy per step
        - Total step count (not trimmed with the history)
    """

    def __init__(self, history_length: int = 1000):
        """
        Initialize metrics tracker.

        Args:
            history_length: Maximum history to store
        """
        self.history_length = history_length

        self.losses: List[float] = []
        self.accuracies: List[float] = []
        self.total_steps = 0

    def add(self, metrics: TrainingMetrics) -> None:
        """Add one step's metrics."""
        self.losses.append(metrics.loss)
        self.accuracies.append(metrics.accuracy)
        self.total_steps += 1

        # Trim to history length
        if len(self.losses) > self.history_length:
            self.losses = self.losses[-self.history_length:]
            self.accuracies = self.accuracies[-self.history_length:]

    def clear(self) -> None:
        self.losses = []
        self.accuracies = []
        self.total_steps = 0

    def __len__(self) -> int:
        return len(self.losses)

    @property
    def latest(self) -> Optional[TrainingMetrics]:
        if not self.losses:
            return None
        return TrainingMetrics(self.losses[-1], self.accuracies[-1])

    def get_recent_average(self, metric: str, n: int = 100) -> Optional[float]:
        """Get average of last n values for 'losses' or 'accuracies' (None if empty)."""
        values = getattr(self, metric, None)
        if not values:
            return None
        return float(np.mean(values[-n:]))

    def get_best_loss(self) -> Optional[float]:
        """Lowest loss in the stored history."""
        return min(self.losses) if self.losses else None

    def get_best_accuracy(self) -> float:
        return max(self.accuracies) if self.accuracies else 0.0
