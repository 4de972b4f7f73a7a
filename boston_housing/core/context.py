"""
Tensor view of a loaded dataset, with train-derived normalization applied.
"""

from dataclasses import dataclass

import torch

from .data import BostonHousingDataset
from .normalization import determine_mean_and_stddev, normalize_tensor


@dataclass(frozen=True)
class HousingTensors:
    """Everything training and baseline estimation read from the dataset."""

    raw_train_features: torch.Tensor
    train_features: torch.Tensor
    train_target: torch.Tensor
    raw_test_features: torch.Tensor
    test_features: torch.Tensor
    test_target: torch.Tensor
    mean: torch.Tensor
    std: torch.Tensor

    @property
    def num_features(self) -> int:
        return int(self.train_features.shape[1])


def arrays_to_tensors(dataset: BostonHousingDataset) -> HousingTensors:
    """
    Convert loaded arrays into tensors and normalize features.

    Mean and standard deviation come from the training features only and are
    applied unchanged to the test features.
    """
    if not dataset.is_loaded:
        raise RuntimeError("Dataset not loaded; call load_data() first")

    raw_train = torch.tensor(dataset.train_features, dtype=torch.float32)
    raw_test = torch.tensor(dataset.test_features, dtype=torch.float32)
    mean, std = determine_mean_and_stddev(raw_train)

    return HousingTensors(
        raw_train_features=raw_train,
        train_features=normalize_tensor(raw_train, mean, std),
        train_target=torch.tensor(dataset.train_target, dtype=torch.float32),
        raw_test_features=raw_test,
        test_features=normalize_tensor(raw_test, mean, std),
        test_target=torch.tensor(dataset.test_target, dtype=torch.float32),
        mean=mean,
        std=std,
    )
