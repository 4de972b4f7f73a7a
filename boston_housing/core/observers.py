"""
Progress observers.

A training run reports to its surroundings through three hooks: status
text, baseline text and one loss point per epoch. Anything that displays or
records progress implements ``TrainingObserver``.
"""

import re
from typing import Dict, List, Optional

from loguru import logger

from .storage import HistoryStorage

_EPOCH_STATUS = re.compile(r"^Epoch \d+ of \d+ completed\.$")


class TrainingObserver:
    """Receives status updates and per-epoch loss points. Hooks default to no-ops."""

    def update_status(self, message: str) -> None:
        pass

    def update_baseline_status(self, message: str) -> None:
        pass

    def plot_data(self, epoch: int, train_loss: float, val_loss: Optional[float]) -> None:
        pass


class LoggingObserver(TrainingObserver):
    """
    Writes status text to the log.

    Epoch points are logged at info level for the first epoch and every
    ``log_every`` epochs after that, debug otherwise. Per-epoch status lines
    always go to debug.
    """

    def __init__(self, log_every: int = 10):
        self.log_every = log_every

    def update_status(self, message: str) -> None:
        if _EPOCH_STATUS.match(message):
            logger.debug(message)
            return
        for line in message.splitlines():
            logger.info(line)

    def update_baseline_status(self, message: str) -> None:
        logger.info(message)

    def plot_data(self, epoch: int, train_loss: float, val_loss: Optional[float]) -> None:
        msg = f"Epoch {epoch + 1} | Loss: {train_loss:.4f}"
        if val_loss is not None:
            msg += f" | Val Loss: {val_loss:.4f}"
        if epoch == 0 or (epoch + 1) % self.log_every == 0:
            logger.info(msg)
        else:
            logger.debug(msg)


class HistoryObserver(TrainingObserver):
    """
    Collects loss points for one model, optionally persisting them.

    Args:
        model_name: Series name the points are recorded under
        storage: Optional storage receiving every point
    """

    def __init__(self, model_name: str, storage: Optional[HistoryStorage] = None):
        self.model_name = model_name
        self.storage = storage
        self.points: List[Dict[str, Optional[float]]] = []
        self.baseline_message: Optional[str] = None

    def update_baseline_status(self, message: str) -> None:
        self.baseline_message = message

    def plot_data(self, epoch: int, train_loss: float, val_loss: Optional[float]) -> None:
        self.points.append({"epoch": epoch, "train_loss": train_loss, "val_loss": val_loss})
        if self.storage is not None:
            self.storage.save_point(self.model_name, epoch, train_loss, val_loss)


class CompositeObserver(TrainingObserver):
    """Forwards every hook to each wrapped observer in order."""

    def __init__(self, observers: List[TrainingObserver]):
        self.observers = list(observers)

    def update_status(self, message: str) -> None:
        for observer in self.observers:
            observer.update_status(message)

    def update_baseline_status(self, message: str) -> None:
        for observer in self.observers:
            observer.update_baseline_status(message)

    def plot_data(self, epoch: int, train_loss: float, val_loss: Optional[float]) -> None:
        for observer in self.observers:
            observer.plot_data(epoch, train_loss, val_loss)
