"""
Application flow: load the data once, then train models on request.
"""

from typing import Optional

import torch.nn as nn
from loguru import logger

from .core.baseline import compute_baseline
from .core.context import HousingTensors, arrays_to_tensors
from .core.data import BostonHousingDataset
from .core.models import build_model, describe_model
from .core.observers import LoggingObserver, TrainingObserver
from .core.trainer import Trainer, TrainingResult


class BostonHousingApp:
    """
    Loads the dataset, estimates the baseline and trains models by name.

    Args:
        dataset: Dataset to use (loaded in ``setup`` if not already)
        trainer: Trainer used for every ``train`` call. A trainer that already
            has an observer keeps it; otherwise it reports to ``observer``
        observer: Receives status, baseline and loss updates

    Example:
        app = BostonHousingApp(BostonHousingDataset(data_dir="./data"))
        app.setup()
        result = app.train("mlp")
    """

    def __init__(
        self,
        dataset: Optional[BostonHousingDataset] = None,
        trainer: Optional[Trainer] = None,
        observer: Optional[TrainingObserver] = None,
    ):
        self.dataset = dataset or BostonHousingDataset()
        self.observer = observer or LoggingObserver()
        self.trainer = trainer or Trainer()
        if self.trainer.observer is None:
            self.trainer.observer = self.observer

        self.tensors: Optional[HousingTensors] = None
        self.baseline: Optional[float] = None
        self.model: Optional[nn.Module] = None

    @property
    def is_ready(self) -> bool:
        return self.tensors is not None

    def setup(self) -> "BostonHousingApp":
        """Load data, convert it to normalized tensors and compute the baseline."""
        if not self.dataset.is_loaded:
            self.dataset.load_data()
        self.observer.update_status("Data loaded, converting to tensors")

        self.tensors = arrays_to_tensors(self.dataset)
        self.observer.update_status(
            "Data is now available as tensors.\nRun a train command to begin."
        )

        self.observer.update_baseline_status("Estimating baseline loss")
        self.baseline = compute_baseline(self.tensors, self.observer)
        return self

    def train(self, model_name: str, **model_params) -> TrainingResult:
        """Build the named model and train it."""
        if not self.is_ready:
            raise RuntimeError("App not set up; call setup() first")

        model = build_model(model_name, self.tensors.num_features, **model_params)
        for line in describe_model(model):
            logger.debug(f"{model_name}: {line}")

        self.model = model
        return self.trainer.run(model, self.tensors)
