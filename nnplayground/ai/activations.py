"""
Activation Functions
====================

Elementwise nonlinearities applied after each dense transform, paired with
their derivatives.

Every derivative is evaluated at the PRE-activation value z (not at f(z)),
which is what backpropagation needs:

    dL/dz = dL/dy * f'(z)

    linear   f(z) = z                 f'(z) = 1
    sigmoid  f(z) = 1 / (1 + e^-z)    f'(z) = f(z) * (1 - f(z))
    relu     f(z) = max(0, z)         f'(z) = 1 if z > 0 else 0
    tanh     f(z) = tanh(z)           f'(z) = 1 - tanh(z)^2

relu'(0) is taken as 0 (subgradient choice).

All functions accept either a Python float (and return a float) or a torch
tensor (and return a tensor of the same shape).
"""

import functools
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

import torch


Scalar = Union[float, int]
TensorLike = Union[Scalar, torch.Tensor]

# exp() arguments are clamped to this range so sigmoid never overflows
EXP_CLAMP = 60.0

# tanh saturates to +/-1 in float32 long before this
TANH_CLAMP = 20.0


def _elementwise(fn: Callable[[torch.Tensor], torch.Tensor]) -> Callable[[TensorLike], TensorLike]:
    """Let a tensor function also accept and return plain floats."""
    @functools.wraps(fn)
    def wrapper(x):
        if isinstance(x, torch.Tensor):
            return fn(x)
        return float(fn(torch.tensor(float(x), dtype=torch.float64)))
    return wrapper


@_elementwise
def linear(x: torch.Tensor) -> torch.Tensor:
    return x.clone()


@_elementwise
def linear_derivative(x: torch.Tensor) -> torch.Tensor:
    return torch.ones_like(x)


@_elementwise
def sigmoid(x: torch.Tensor) -> torch.Tensor:
    return 1.0 / (1.0 + torch.exp(-x.clamp(-EXP_CLAMP, EXP_CLAMP)))


@_elementwise
def sigmoid_derivative(x: torch.Tensor) -> torch.Tensor:
    s = sigmoid(x)
    return s * (1.0 - s)


@_elementwise
def relu(x: torch.Tensor) -> torch.Tensor:
    return x.clamp(min=0.0)


@_elementwise
def relu_derivative(x: torch.Tensor) -> torch.Tensor:
    return (x > 0).to(x.dtype)


@_elementwise
def tanh(x: torch.Tensor) -> torch.Tensor:
    return torch.tanh(x.clamp(-TANH_CLAMP, TANH_CLAMP))


@_elementwise
def tanh_derivative(x: torch.Tensor) -> torch.Tensor:
    t = tanh(x)
    return 1.0 - t * t


@dataclass(frozen=True)
class ActivationFunction:
    """A named activation with its derivative."""
    name: str
    fn: Callable[[TensorLike], TensorLike]
    derivative: Callable[[TensorLike], TensorLike]

    def __call__(self, x: TensorLike) -> TensorLike:
        return self.fn(x)


ACTIVATIONS: Dict[str, ActivationFunction] = {
    'linear': ActivationFunction('linear', linear, linear_derivative),
    'sigmoid': ActivationFunction('sigmoid', sigmoid, sigmoid_derivative),
    'relu': ActivationFunction('relu', relu, relu_derivative),
    'tanh': ActivationFunction('tanh', tanh, tanh_derivative),
}


def get_activation(name: str) -> ActivationFunction:
    """
    Look up an activation function by name.

    Raises:
        ValueError: If the name is not one of list_activations()
    """
    try:
        return ACTIVATIONS[name.lower()]
    except (KeyError, AttributeError):
        raise ValueError(
            f"Unknown activation '{name}'. Available: {', '.join(ACTIVATIONS)}"
        ) from None


def list_activations() -> List[str]:
    """Names of all supported activation functions."""
    return list(ACTIVATIONS.keys())
