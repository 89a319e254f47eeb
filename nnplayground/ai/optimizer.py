"""
Adam Optimizer
==============

Adaptive per-parameter gradient descent.

Every parameter tensor has its own first moment m and second moment v
(stored next to the parameter, in the DenseLayer that owns it). The step
counter t is shared: it is incremented ONCE per step() call, before any
parameter is touched, so bias correction stays in sync across all weights
and biases updated in the same training step.

    t += 1
    m = b1*m + (1-b1)*g
    v = b2*v + (1-b2)*g^2
    m_hat = m / (1 - b1^t)
    v_hat = v / (1 - b2^t)
    theta -= lr * m_hat / (sqrt(v_hat) + eps)

Reference:
    Kingma & Ba, 2014 - "Adam: A Method for Stochastic Optimization"
"""

from typing import Iterable, Tuple

import torch

# (parameter, gradient, first moment, second moment), all the same shape
ParamSlot = Tuple[torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor]


class AdamOptimizer:
    """
    Adam update rule with a shared step counter.

    Example:
        >>> opt = AdamOptimizer()
        >>> opt.step(slot for layer in layers for slot in layer.parameters())
    """

    def __init__(
        self,
        learning_rate: float = 0.01,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-8,
    ):
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon
        self.t = 0

    def step(self, slots: Iterable[ParamSlot]) -> None:
        """
        Apply one Adam update to every slot, in place.

        Args:
            slots: (param, grad, m, v) tuples; m and v are updated in place
        """
        self.t += 1
        bias_correction1 = 1.0 - self.beta1 ** self.t
        bias_correction2 = 1.0 - self.beta2 ** self.t

        for param, grad, m, v in slots:
            m.mul_(self.beta1).add_(grad, alpha=1.0 - self.beta1)
            v.mul_(self.beta2).addcmul_(grad, grad, value=1.0 - self.beta2)

            m_hat = m / bias_correction1
            v_hat = v / bias_correction2
            param.sub_(self.learning_rate * m_hat / (v_hat.sqrt() + self.epsilon))

    def reset(self) -> None:
        """Restart bias correction (moments live in the layers)."""
        self.t = 0
