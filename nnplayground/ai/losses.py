"""
Loss and Accuracy
=================

Mean squared error over the output vector:

    loss       = mean((pred - target)^2)
    dloss/dpred = 2 * (pred - target) / N          (N = output width)

For a batch the loss is averaged over the samples too, so the batch
gradient is additionally divided by the batch size. That is the same as
averaging the per-sample gradients.

Accuracy policy:
    classification, 1 output   -> prediction >= threshold matches target >= threshold
    classification, >1 outputs -> argmax(prediction) == argmax(target)
    regression                 -> every output within `tolerance` of its target
"""

import torch

from ..data.datasets import CLASSIFICATION, REGRESSION


def _as_batch(x: torch.Tensor) -> torch.Tensor:
    return x.unsqueeze(0) if x.dim() == 1 else x


def mse_loss(predictions: torch.Tensor, targets: torch.Tensor) -> float:
    """Mean squared error, averaged over outputs and samples."""
    predictions = _as_batch(predictions)
    targets = _as_batch(targets)
    if predictions.shape != targets.shape:
        raise ValueError(
            f"Prediction shape {tuple(predictions.shape)} does not match "
            f"target shape {tuple(targets.shape)}"
        )
    return float(((predictions - targets) ** 2).mean())


def mse_gradient(predictions: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
    """
    Gradient of mse_loss with respect to the predictions.

    Returns a tensor shaped like the (batched) predictions.
    """
    predictions = _as_batch(predictions)
    targets = _as_batch(targets)
    batch_size, width = predictions.shape
    return 2.0 * (predictions - targets) / (width * batch_size)


def accuracy(
    predictions: torch.Tensor,
    targets: torch.Tensor,
    task: str = CLASSIFICATION,
    threshold: float = 0.5,
    tolerance: float = 0.1,
) -> float:
    """Fraction of samples predicted correctly under the policy above."""
    predictions = _as_batch(predictions)
    targets = _as_batch(targets)
    if predictions.shape[0] == 0:
        return 0.0

    if task == REGRESSION:
        correct = ((predictions - targets).abs() <= tolerance).all(dim=1)
    elif predictions.shape[1] == 1:
        correct = (predictions[:, 0] >= threshold) == (targets[:, 0] >= threshold)
    else:
        correct = predictions.argmax(dim=1) == targets.argmax(dim=1)

    return float(correct.to(torch.float32).mean())
