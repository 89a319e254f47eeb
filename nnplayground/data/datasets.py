"""
Synthetic Datasets
==================

Small 2-D toy problems for watching a network learn.

    xor     4 canonical boolean pairs            (classification)
    circle  inside/outside a circle              (classification)
    spiral  two interleaved spiral arms          (classification)
    linear  split by the diagonal y = x          (classification)
    sine    one period of a noisy sine curve     (regression)

Every generator takes an explicit seed and draws from its own
numpy Generator, so the same seed always gives the same points and no
global random state is touched. seed=None draws fresh OS entropy.

All points live in the unit square, inputs are (n, 2), outputs are (n, 1).
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

CLASSIFICATION = 'classification'
REGRESSION = 'regression'
TASKS = (CLASSIFICATION, REGRESSION)


@dataclass
class TrainingData:
    """
    Parallel input/output rows.

    Attributes:
        name: Dataset identifier
        inputs: (num_samples, input_size) float32 array
        outputs: (num_samples, output_size) float32 array
        task: 'classification' or 'regression'
    """
    name: str
    inputs: np.ndarray
    outputs: np.ndarray
    task: str = CLASSIFICATION

    def __post_init__(self):
        self.inputs = np.asarray(self.inputs, dtype=np.float32)
        self.outputs = np.asarray(self.outputs, dtype=np.float32)
        if self.inputs.ndim != 2 or self.outputs.ndim != 2:
            raise ValueError("inputs and outputs must be 2-D (samples x features)")
        if len(self.inputs) != len(self.outputs):
            raise ValueError(
                f"inputs has {len(self.inputs)} rows but outputs has {len(self.outputs)}"
            )
        if self.inputs.shape[1] == 0 or self.outputs.shape[1] == 0:
            raise ValueError("inputs and outputs need at least one column")
        if self.task not in TASKS:
            raise ValueError(f"Unknown task '{self.task}'. Expected one of {TASKS}")

    def __len__(self) -> int:
        return len(self.inputs)

    @property
    def input_size(self) -> int:
        return self.inputs.shape[1]

    @property
    def output_size(self) -> int:
        return self.outputs.shape[1]

    def copy(self) -> 'TrainingData':
        return TrainingData(self.name, self.inputs.copy(), self.outputs.copy(), self.task)


def make_xor() -> TrainingData:
    """(0,0)->0, (0,1)->1, (1,0)->1, (1,1)->0."""
    inputs = [[0, 0], [0, 1], [1, 0], [1, 1]]
    outputs = [[0], [1], [1], [0]]
    return TrainingData('xor', inputs, outputs)


def make_circle(
    num_points: int = 100,
    seed: Optional[int] = None,
    radius: float = 0.5,
    center: tuple = (0.5, 0.5),
) -> TrainingData:
    """Uniform points in the unit square, label 1 strictly inside the circle."""
    _check_points(num_points)
    rng = np.random.default_rng(seed)
    inputs = rng.random((num_points, 2))
    distance = np.hypot(inputs[:, 0] - center[0], inputs[:, 1] - center[1])
    outputs = (distance < radius).astype(np.float32).reshape(-1, 1)
    return TrainingData('circle', inputs, outputs)


def make_spiral(num_points: int = 100, turns: int = 2) -> TrainingData:
    """
    Two spiral arms of num_points/2 points each, arm k labelled k.

    Point i of arm k:
        r     = i / (n/2) * 0.8 + 0.1           (0.1 .. 0.9)
        theta = i / (n/2) * turns * 2pi + k*pi
        (x, y) = (0.5 + r cos(theta) * 0.5, 0.5 + r sin(theta) * 0.5)

    Fully deterministic (no randomness involved).
    """
    _check_points(num_points)
    if num_points % 2:
        raise ValueError(f"Spiral needs an even number of points, got {num_points}")

    half = num_points // 2
    inputs = []
    outputs = []
    for k in (0, 1):
        for i in range(half):
            r = i / half * 0.8 + 0.1
            theta = i / half * turns * math.pi * 2 + k * math.pi
            inputs.append([0.5 + r * math.cos(theta) * 0.5, 0.5 + r * math.sin(theta) * 0.5])
            outputs.append([k])
    return TrainingData('spiral', inputs, outputs)


def make_linear(num_points: int = 100, seed: Optional[int] = None) -> TrainingData:
    """Uniform points in the unit square, label 1 above the diagonal (y > x)."""
    _check_points(num_points)
    rng = np.random.default_rng(seed)
    inputs = rng.random((num_points, 2))
    outputs = (inputs[:, 1] > inputs[:, 0]).astype(np.float32).reshape(-1, 1)
    return TrainingData('linear', inputs, outputs)


def make_sine(
    num_points: int = 100,
    seed: Optional[int] = None,
    noise: float = 0.05,
) -> TrainingData:
    """
    Regression on exactly one period of a sine wave.

    t is evenly spaced over [0, 1]. Inputs are (t, u) where u is uniform
    noise carrying no information about the target (the network has to
    learn to ignore it). Target = 0.5 + 0.4 sin(2 pi t) + N(0, noise),
    clipped to [0, 1] so a sigmoid output can reach it.
    """
    _check_points(num_points)
    rng = np.random.default_rng(seed)
    t = np.linspace(0.0, 1.0, num_points)
    distractor = rng.random(num_points)
    target = 0.5 + 0.4 * np.sin(2 * np.pi * t)
    if noise > 0:
        target = target + rng.normal(0.0, noise, size=num_points)
    target = np.clip(target, 0.0, 1.0)
    inputs = np.stack([t, distractor], axis=1)
    return TrainingData('sine', inputs, target.reshape(-1, 1), task=REGRESSION)


def _check_points(num_points: int) -> None:
    if num_points <= 0:
        raise ValueError(f"num_points must be positive, got {num_points}")
