"""
Naive reference loss: always predict the average training price.
"""

from typing import Optional

import torch
from loguru import logger

from .context import HousingTensors
from .observers import TrainingObserver


def baseline_loss(target: torch.Tensor, reference: Optional[torch.Tensor] = None) -> float:
    """
    Mean squared error of predicting ``mean(reference)`` for every row of ``target``.

    ``reference`` defaults to ``target`` itself.
    """
    if reference is None:
        reference = target
    avg = reference.mean()
    return float((target - avg).pow(2).mean())


def compute_baseline(tensors: HousingTensors, observer: Optional[TrainingObserver] = None) -> float:
    """
    Compute the baseline loss on the test split using the training average.

    Args:
        tensors: Dataset tensors
        observer: Receives the baseline message

    Returns:
        Baseline mean squared error
    """
    avg_price = float(tensors.train_target.mean())
    logger.info(f"Average price: {avg_price:.4f}")

    baseline = baseline_loss(tensors.test_target, tensors.train_target)
    logger.info(f"Baseline loss: {baseline:.4f}")

    if observer is not None:
        observer.update_baseline_status(f"Baseline loss (meanSquaredError) is {baseline:.2f}")
    return baseline
