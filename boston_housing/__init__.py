"""
Boston Housing regression demo.

Trains a linear model or a small sigmoid MLP on the Boston Housing dataset
and reports training/validation loss per epoch.

Quick start:
    from boston_housing import BostonHousingApp

    app = BostonHousingApp()
    app.setup()            # download, normalize, baseline
    result = app.train("mlp")
"""

__version__ = "0.1.0"

from .app import BostonHousingApp
from .core import (
    BostonHousingDataset,
    HousingTensors,
    Trainer,
    TrainingObserver,
    TrainingResult,
    arrays_to_tensors,
    compute_baseline,
)

__all__ = [
    "BostonHousingApp",
    "BostonHousingDataset",
    "HousingTensors",
    "Trainer",
    "TrainingObserver",
    "TrainingResult",
    "arrays_to_tensors",
    "compute_baseline",
]
