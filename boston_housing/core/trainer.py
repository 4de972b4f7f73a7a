"""
Training loop for the housing regression models.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import torch
import torch.nn as nn
import torch.optim as optim
from loguru import logger
from torch.utils.data import DataLoader, TensorDataset

from .context import HousingTensors
from .observers import TrainingObserver
from .registry import registry

NUM_EPOCHS = 200
BATCH_SIZE = 40
LEARNING_RATE = 0.01

EpochCallback = Callable[[int, Dict[str, Optional[float]]], None]


@dataclass
class TrainingResult:
    """Outcome of one training run."""

    epochs: int
    train_loss_history: List[float] = field(default_factory=list)
    val_loss_history: List[float] = field(default_factory=list)
    final_train_loss: Optional[float] = None
    final_val_loss: Optional[float] = None
    test_loss: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Trainer:
    """
    Compiles and fits a regression model.

    Args:
        epochs: Number of passes over the training data
        batch_size: Mini-batch size for training and evaluation
        learning_rate: Optimizer learning rate
        optimizer: Optimizer name (sgd, adam, adamw, rmsprop)
        loss: Registered loss name
        momentum: SGD momentum
        weight_decay: Optimizer weight decay
        device: Torch device; cpu when omitted
        observer: Receives status text and per-epoch loss points; a no-op
            observer is used by ``run`` while this is None

    Example:
        trainer = Trainer(observer=LoggingObserver())
        result = trainer.run(linear_regression_model(12), tensors)
    """

    def __init__(
        self,
        epochs: int = NUM_EPOCHS,
        batch_size: int = BATCH_SIZE,
        learning_rate: float = LEARNING_RATE,
        optimizer: str = "sgd",
        loss: str = "mse",
        momentum: float = 0.0,
        weight_decay: float = 0.0,
        device: Optional[Union[str, torch.device]] = None,
        observer: Optional[TrainingObserver] = None,
    ):
        self.epochs = epochs
        self.batch_size = batch_size
        self.learning_rate = learning_rate
        self.optimizer_name = optimizer.lower()
        self.loss_name = loss
        self.momentum = momentum
        self.weight_decay = weight_decay
        self.device = torch.device(device) if device is not None else torch.device("cpu")
        self.observer = observer

        self.optimizer: Optional[optim.Optimizer] = None
        self.loss_fn: Optional[Callable] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any], **kwargs) -> "Trainer":
        """Create a trainer from the ``training`` section of a config."""
        training = config.get("training", {})
        opt_config = training.get("optimizer", {})
        return cls(
            epochs=training.get("epochs", NUM_EPOCHS),
            batch_size=training.get("batch_size", BATCH_SIZE),
            learning_rate=opt_config.get("lr", LEARNING_RATE),
            optimizer=opt_config.get("name", "sgd"),
            loss=training.get("loss", "mse"),
            momentum=opt_config.get("momentum", 0.0),
            weight_decay=opt_config.get("weight_decay", 0.0),
            **kwargs,
        )

    # ==================== Setup ====================

    def _setup_optimizer(self, model: nn.Module) -> optim.Optimizer:
        params = model.parameters()
        lr, wd = self.learning_rate, self.weight_decay

        if self.optimizer_name == "sgd":
            return optim.SGD(params, lr=lr, momentum=self.momentum, weight_decay=wd)
        elif self.optimizer_name == "adam":
            return optim.Adam(params, lr=lr, weight_decay=wd)
        elif self.optimizer_name == "adamw":
            return optim.AdamW(params, lr=lr, weight_decay=wd)
        elif self.optimizer_name == "rmsprop":
            return optim.RMSprop(params, lr=lr, weight_decay=wd)
        else:
            raise ValueError(f"Unknown optimizer: {self.optimizer_name}")

    def compile(self, model: nn.Module) -> nn.Module:
        """Attach optimizer and loss function to ``model``."""
        model.to(self.device)
        self.loss_fn = registry.get_loss(self.loss_name)
        self.optimizer = self._setup_optimizer(model)
        return model

    # ==================== Training ====================

    def _loader(self, features: torch.Tensor, target: torch.Tensor, shuffle: bool) -> DataLoader:
        return DataLoader(
            TensorDataset(features, target),
            batch_size=self.batch_size,
            shuffle=shuffle,
            num_workers=0,
        )

    def train_epoch(self, model: nn.Module, loader: DataLoader) -> float:
        """
        Train for one epoch.

        Returns:
            Mean training loss, weighted by batch size
        """
        model.train()
        total_loss = 0.0
        total = 0

        for inputs, targets in loader:
            inputs = inputs.to(self.device)
            targets = targets.to(self.device)

            self.optimizer.zero_grad()
            loss = self.loss_fn(model, inputs, targets)
            loss.backward()
            self.optimizer.step()

            total_loss += loss.item() * inputs.size(0)
            total += inputs.size(0)

        return total_loss / total

    def evaluate(self, model: nn.Module, features: torch.Tensor, target: torch.Tensor) -> float:
        """Mean loss of ``model`` over ``features``/``target``."""
        if self.loss_fn is None:
            raise RuntimeError("Trainer not compiled; call compile() first")

        model.eval()
        total_loss = 0.0
        total = 0

        with torch.no_grad():
            for inputs, targets in self._loader(features, target, shuffle=False):
                inputs = inputs.to(self.device)
                targets = targets.to(self.device)
                loss = self.loss_fn(model, inputs, targets)
                total_loss += loss.item() * inputs.size(0)
                total += inputs.size(0)

        return total_loss / total

    def fit(
        self,
        model: nn.Module,
        features: torch.Tensor,
        target: torch.Tensor,
        validation_data: Optional[Tuple[torch.Tensor, torch.Tensor]] = None,
        on_epoch_end: Optional[EpochCallback] = None,
    ) -> Dict[str, List[float]]:
        """
        Fit ``model`` for ``self.epochs`` epochs.

        Args:
            model: Compiled model
            features: Training inputs
            target: Training targets
            validation_data: Optional (features, target) evaluated after each epoch
            on_epoch_end: Called with ``(epoch, {"loss", "val_loss"})``

        Returns:
            History with "loss" and "val_loss" lists
        """
        if self.optimizer is None:
            raise RuntimeError("Trainer not compiled; call compile() first")

        loader = self._loader(features, target, shuffle=True)
        history: Dict[str, List[float]] = {"loss": [], "val_loss": []}

        for epoch in range(self.epochs):
            train_loss = self.train_epoch(model, loader)
            val_loss = None
            if validation_data is not None:
                val_loss = self.evaluate(model, *validation_data)
                history["val_loss"].append(val_loss)
            history["loss"].append(train_loss)

            if on_epoch_end is not None:
                on_epoch_end(epoch, {"loss": train_loss, "val_loss": val_loss})

        return history

    def run(self, model: nn.Module, tensors: HousingTensors) -> TrainingResult:
        """
        Compile ``model``, train it on the training split (validating on the
        test split) and evaluate it on the test split.
        """
        observer = self.observer if self.observer is not None else TrainingObserver()
        observer.update_status("Compiling model...")
        self.compile(model)

        train_x = tensors.train_features.to(self.device)
        train_y = tensors.train_target.to(self.device)
        test_x = tensors.test_features.to(self.device)
        test_y = tensors.test_target.to(self.device)

        def on_epoch_end(epoch: int, logs: Dict[str, Optional[float]]):
            observer.update_status(f"Epoch {epoch + 1} of {self.epochs} completed.")
            observer.plot_data(epoch, logs["loss"], logs["val_loss"])

        observer.update_status("Starting training process...")
        history = self.fit(
            model, train_x, train_y, validation_data=(test_x, test_y), on_epoch_end=on_epoch_end
        )

        result = TrainingResult(
            epochs=self.epochs,
            train_loss_history=history["loss"],
            val_loss_history=history["val_loss"],
        )
        if history["loss"]:
            result.final_train_loss = history["loss"][-1]
            result.final_val_loss = history["val_loss"][-1]
        else:
            logger.info("Skipping training (epochs=0)")
            result.final_train_loss = self.evaluate(model, train_x, train_y)

        observer.update_status("Running on test data...")
        result.test_loss = self.evaluate(model, test_x, test_y)
        observer.update_status(
            f"Final train-set loss: {result.final_train_loss:.4f}\n"
            f"Test-set loss: {result.test_loss:.4f}"
        )
        return result
