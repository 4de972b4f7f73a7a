"""
Core modules: data, normalization, models, training and progress reporting.
"""

from .baseline import baseline_loss, compute_baseline
from .context import HousingTensors, arrays_to_tensors
from .data import BostonHousingDataset
from .exceptions import BostonHousingError, DatasetDownloadError, DatasetFormatError
from .models import (
    build_model,
    linear_regression_model,
    multi_layer_perceptron_regression_model,
)
from .normalization import determine_mean_and_stddev, normalize_tensor
from .observers import CompositeObserver, HistoryObserver, LoggingObserver, TrainingObserver
from .registry import registry
from .storage import HistoryStorage
from .trainer import Trainer, TrainingResult

__all__ = [
    "BostonHousingDataset",
    "BostonHousingError",
    "CompositeObserver",
    "DatasetDownloadError",
    "DatasetFormatError",
    "HistoryObserver",
    "HistoryStorage",
    "HousingTensors",
    "LoggingObserver",
    "Trainer",
    "TrainingObserver",
    "TrainingResult",
    "arrays_to_tensors",
    "baseline_loss",
    "build_model",
    "compute_baseline",
    "determine_mean_and_stddev",
    "linear_regression_model",
    "multi_layer_perceptron_regression_model",
    "normalize_tensor",
    "registry",
]
