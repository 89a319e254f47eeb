"""
Dense Layer
===========

A fully-connected layer  y = f(x . W + b)  with explicit gradients.

Shapes:
    W : (in_features, out_features)
    b : (out_features,)
    x : (in_features,) or (batch, in_features)

Backward pass, given dL/dy for the cached batch:
    delta = dL/dy * f'(z)          (z = x . W + b, the pre-activation)
    dL/dW = x^T . delta            (summed over the batch)
    dL/db = sum(delta)
    dL/dx = delta . W^T            (handed to the previous layer)

No autograd: gradients are computed by hand so every intermediate value is
available for inspection.
"""

import math
from typing import List, Optional

import torch

from .activations import ActivationFunction, get_activation
from .optimizer import ParamSlot


class DenseLayer:
    """
    Weight matrix + bias vector, with Adam moment buffers for both.

    Attributes:
        weights (Tensor): (in_features, out_features)
        biases (Tensor): (out_features,)
        grad_weights / grad_biases (Tensor): gradients from the last backward()
        m_weights / v_weights / m_biases / v_biases (Tensor): Adam moments
    """

    def __init__(
        self,
        in_features: int,
        out_features: int,
        activation: str = 'linear',
        generator: Optional[torch.Generator] = None,
        device: Optional[torch.device] = None,
        dtype: torch.dtype = torch.float32,
    ):
        """
        Initialize the layer.

        Args:
            in_features: Width of the incoming activation vector
            out_features: Number of neurons in this layer
            activation: Name of the activation function
            generator: Random generator for weight initialization
            device: Device for all buffers (default CPU)
            dtype: Floating point type of all buffers
        """
        if in_features <= 0 or out_features <= 0:
            raise ValueError(
                f"Layer dimensions must be positive, got {in_features}x{out_features}"
            )

        self.in_features = in_features
        self.out_features = out_features
        self.activation: ActivationFunction = get_activation(activation)
        self.device = device or torch.device('cpu')
        self.dtype = dtype

        # Forward cache (needed by backward)
        self._input: Optional[torch.Tensor] = None
        self._preactivation: Optional[torch.Tensor] = None

        self.reset_parameters(generator)

    @property
    def activation_name(self) -> str:
        return self.activation.name

    def reset_parameters(self, generator: Optional[torch.Generator] = None) -> None:
        """
        Draw fresh weights and clear biases, gradients and moments.

        Uses Xavier/Glorot uniform initialization, which keeps the
        pre-activations small enough to avoid saturating sigmoid/tanh.
        """
        bound = math.sqrt(6.0 / (self.in_features + self.out_features))

        # Sample on CPU so a CPU generator works for any target device
        weights = torch.rand(
            self.in_features, self.out_features,
            generator=generator, dtype=self.dtype
        )
        self.weights = ((weights * 2.0 - 1.0) * bound).to(self.device)
        self.biases = torch.zeros(self.out_features, dtype=self.dtype, device=self.device)

        self.grad_weights = torch.zeros_like(self.weights)
        self.grad_biases = torch.zeros_like(self.biases)

        self.m_weights = torch.zeros_like(self.weights)
        self.v_weights = torch.zeros_like(self.weights)
        self.m_biases = torch.zeros_like(self.biases)
        self.v_biases = torch.zeros_like(self.biases)

        self._input = None
        self._preactivation = None

    def forward(self, x: torch.Tensor, cache: bool = True) -> torch.Tensor:
        """
        Forward pass.

        Args:
            x: Input of shape (in_features,) or (batch, in_features)
            cache: Keep x and the pre-activation for backward()

        Returns:
            Activations of shape (out_features,) or (batch, out_features)
        """
        squeeze = x.dim() == 1
        batch = x.unsqueeze(0) if squeeze else x
        if batch.shape[1] != self.in_features:
            raise ValueError(
                f"Expected input width {self.in_features}, got {batch.shape[1]}"
            )

        z = batch @ self.weights + self.biases
        if cache:
            self._input = batch
            self._preactivation = z

        out = self.activation(z)
        return out.squeeze(0) if squeeze else out

    def backward(self, grad_output: torch.Tensor) -> torch.Tensor:
        """
        Backward pass for the most recent cached forward().

        Stores dL/dW and dL/db in grad_weights / grad_biases.

        Args:
            grad_output: dL/dy, shaped like the forward output

        Returns:
            dL/dx, shaped like the forward input
        """
        if self._input is None or self._preactivation is None:
            raise RuntimeError("backward() called before forward(). Call forward() first.")

        squeeze = grad_output.dim() == 1
        grad = grad_output.unsqueeze(0) if squeeze else grad_output

        delta = grad * self.activation.derivative(self._preactivation)
        self.grad_weights = self._input.t() @ delta
        self.grad_biases = delta.sum(dim=0)

        grad_input = delta @ self.weights.t()
        return grad_input.squeeze(0) if squeeze else grad_input

    def parameters(self) -> List[ParamSlot]:
        """(param, grad, m, v) slots for the optimizer."""
        return [
            (self.weights, self.grad_weights, self.m_weights, self.v_weights),
            (self.biases, self.grad_biases, self.m_biases, self.v_biases),
        ]

    def count_parameters(self) -> int:
        return self.in_features * self.out_features + self.out_features

    def release(self) -> None:
        """Drop every buffer. The layer cannot be used afterwards."""
        for name in ('weights', 'biases', 'grad_weights', 'grad_biases',
                     'm_weights', 'v_weights', 'm_biases', 'v_biases'):
            setattr(self, name, None)
        self._input = None
        self._preactivation = None

    def __repr__(self) -> str:
        return (f"DenseLayer({self.in_features} -> {self.out_features}, "
                f"activation={self.activation_name})")
