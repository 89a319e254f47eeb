"""
Data Module
===========

Synthetic datasets the network can be trained on.

Classes:
    TrainingData - Parallel input/output arrays with a task type

Dataset Registry:
    Use generate_dataset(name) to build a dataset by name
    Use list_datasets() to get all available datasets
    Use get_dataset_info(name) to get metadata about a dataset
"""

from typing import Dict, List, Optional, Any

from .datasets import (
    TrainingData,
    CLASSIFICATION,
    REGRESSION,
    make_xor,
    make_circle,
    make_spiral,
    make_linear,
    make_sine,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# DATASET REGISTRY
# =============================================================================
# Maps dataset names to their generators and metadata.
# To add a new dataset:
#   1. Write a make_<name>(...) generator returning TrainingData
#   2. Add an entry to DATASET_REGISTRY below
#   3. The dataset will automatically appear in the CLI and the visual mode

DATASET_REGISTRY: Dict[str, Dict[str, Any]] = {
    'xor': {
        'generator': lambda num_points, seed, noise, turns: make_xor(),
        'name': 'XOR Problem',
        'description': 'Four boolean points that no single line can separate',
        'task': CLASSIFICATION,
        'sampled': False,
    },
    'circle': {
        'generator': lambda num_points, seed, noise, turns: make_circle(num_points, seed),
        'name': 'Concentric Circles',
        'description': 'Points inside vs outside a circle (curved boundary)',
        'task': CLASSIFICATION,
        'sampled': True,
    },
    'spiral': {
        'generator': lambda num_points, seed, noise, turns: make_spiral(num_points, turns),
        'name': 'Spiral Classification',
        'description': 'Two interleaved spiral arms, needs several hidden layers',
        'task': CLASSIFICATION,
        'sampled': False,
    },
    'linear': {
        'generator': lambda num_points, seed, noise, turns: make_linear(num_points, seed),
        'name': 'Linear Separation',
        'description': 'Points split by the diagonal, solvable without hidden layers',
        'task': CLASSIFICATION,
        'sampled': True,
    },
    'sine': {
        'generator': lambda num_points, seed, noise, turns: make_sine(num_points, seed, noise),
        'name': 'Sine Function',
        'description': 'Approximate one period of a noisy sine wave (regression)',
        'task': REGRESSION,
        'sampled': True,
    },
}

DEFAULT_DATASET = 'xor'


def generate_dataset(
    name: str,
    num_points: int = 100,
    seed: Optional[int] = None,
    noise: float = 0.05,
    turns: int = 2,
) -> TrainingData:
    """
    Build a dataset by name.

    Unknown names fall back to xor (with a warning) so a stale selection
    never leaves the model without data.

    Args:
        name: Dataset identifier (e.g., 'xor', 'spiral')
        num_points: Number of points for sampled/generated datasets
        seed: Seed for the random generators (None for fresh randomness)
        noise: Standard deviation of the sine target noise
        turns: Number of turns of each spiral arm

    Example:
        >>> data = generate_dataset('circle', num_points=50, seed=0)
        >>> len(data)  # 50
    """
    entry = DATASET_REGISTRY.get(name.lower())
    if entry is None:
        logger.warning(f"Unknown dataset '{name}', falling back to '{DEFAULT_DATASET}'")
        entry = DATASET_REGISTRY[DEFAULT_DATASET]
    return entry['generator'](num_points, seed, noise, turns)


def list_datasets() -> List[str]:
    """
    Get a list of all available dataset names.

    Example:
        >>> list_datasets()  # ['xor', 'circle', 'spiral', 'linear', 'sine']
    """
    return list(DATASET_REGISTRY.keys())


def get_dataset_info(name: str) -> Optional[Dict[str, Any]]:
    """
    Get metadata about a dataset.

    Returns:
        Dictionary with name, description, task and sampled flag,
        or None if not found
    """
    entry = DATASET_REGISTRY.get(name.lower())
    if entry:
        return {k: v for k, v in entry.items() if k != 'generator'}
    return None


__all__ = [
    'TrainingData',
    'CLASSIFICATION',
    'REGRESSION',
    'make_xor',
    'make_circle',
    'make_spiral',
    'make_linear',
    'make_sine',
    'DATASET_REGISTRY',
    'DEFAULT_DATASET',
    'generate_dataset',
    'list_datasets',
    'get_dataset_info',
]
