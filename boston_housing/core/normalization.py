"""
Z-score normalization of feature columns.
"""

from typing import Tuple

import torch


def determine_mean_and_stddev(data: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Compute per-column mean and population standard deviation.

    Args:
        data: 2D tensor (rows x features)

    Returns:
        Tuple of (mean, std), each of shape (features,)
    """
    mean = data.mean(dim=0)
    variance = (data - mean).pow(2).mean(dim=0)
    return mean, variance.sqrt()


def normalize_tensor(data: torch.Tensor, mean: torch.Tensor, std: torch.Tensor) -> torch.Tensor:
    """Apply ``(data - mean) / std`` column-wise."""
    return (data - mean) / std
