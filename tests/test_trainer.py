"""Tests for the training loop."""

import math

import pytest
import torch

from boston_housing.core.baseline import compute_baseline
from boston_housing.core.models import build_model
from boston_housing.core.observers import HistoryObserver, TrainingObserver
from boston_housing.core.trainer import BATCH_SIZE, LEARNING_RATE, NUM_EPOCHS, Trainer


class RecordingObserver(TrainingObserver):
    def __init__(self):
        self.statuses = []
        self.points = []

    def update_status(self, message):
        self.statuses.append(message)

    def plot_data(self, epoch, train_loss, val_loss):
        self.points.append((epoch, train_loss, val_loss))


class TestTrainer:

    def test_defaults(self):
        trainer = Trainer()
        assert (trainer.epochs, trainer.batch_size, trainer.learning_rate) == (200, 40, 0.01)
        assert (NUM_EPOCHS, BATCH_SIZE, LEARNING_RATE) == (200, 40, 0.01)
        assert trainer.optimizer_name == "sgd"
        assert trainer.momentum == 0.0

    def test_compile_uses_plain_sgd(self):
        trainer = Trainer()
        trainer.compile(build_model("linear", 12))
        assert isinstance(trainer.optimizer, torch.optim.SGD)
        assert trainer.optimizer.param_groups[0]["lr"] == 0.01

    def test_unknown_optimizer(self):
        with pytest.raises(ValueError, match="Unknown optimizer"):
            Trainer(optimizer="lbfgs-ish").compile(build_model("linear", 12))

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("adam", torch.optim.Adam),
            ("adamw", torch.optim.AdamW),
            ("rmsprop", torch.optim.RMSprop),
        ],
    )
    def test_compile_alternative_optimizers(self, name, expected):
        trainer = Trainer(optimizer=name, learning_rate=0.05, weight_decay=0.001)
        trainer.compile(build_model("linear", 12))
        assert type(trainer.optimizer) is expected
        group = trainer.optimizer.param_groups[0]
        assert (group["lr"], group["weight_decay"]) == (0.05, 0.001)

    def test_mae_loss_is_mean_absolute_error(self):
        model = build_model("linear", 2)
        inputs = torch.tensor([[1.0, 0.0], [0.0, 1.0]])
        targets = torch.tensor([[3.0], [-1.0]])
        trainer = Trainer(loss="mae")
        trainer.compile(model)
        with torch.no_grad():
            expected = (model(inputs) - targets).abs().mean()
        assert trainer.loss_fn(model, inputs, targets).item() == pytest.approx(expected.item())

    def test_unknown_loss(self):
        with pytest.raises(KeyError, match="not found"):
            Trainer(loss="huber").compile(build_model("linear", 12))

    def test_fit_before_compile(self, tensors):
        with pytest.raises(RuntimeError):
            Trainer(epochs=1).fit(build_model("linear", 12), tensors.train_features, tensors.train_target)

    def test_run_reports_every_epoch(self, tensors):
        torch.manual_seed(0)
        observer = RecordingObserver()
        trainer = Trainer(epochs=5, device="cpu", observer=observer)
        result = trainer.run(build_model("linear", 12), tensors)

        assert [p[0] for p in observer.points] == [0, 1, 2, 3, 4]
        assert all(math.isfinite(t) and math.isfinite(v) for _, t, v in observer.points)
        assert len(result.train_loss_history) == 5
        assert len(result.val_loss_history) == 5
        assert result.final_train_loss == result.train_loss_history[-1]
        assert result.final_val_loss == result.val_loss_history[-1]

        assert observer.statuses[0] == "Compiling model..."
        assert observer.statuses[1] == "Starting training process..."
        assert "Epoch 1 of 5 completed." in observer.statuses
        assert "Epoch 5 of 5 completed." in observer.statuses
        assert observer.statuses[-2] == "Running on test data..."
        assert observer.statuses[-1] == (
            f"Final train-set loss: {result.final_train_loss:.4f}\n"
            f"Test-set loss: {result.test_loss:.4f}"
        )

    def test_validation_equals_test_evaluation(self, tensors):
        torch.manual_seed(0)
        trainer = Trainer(epochs=3, device="cpu")
        result = trainer.run(build_model("linear", 12), tensors)
        assert result.test_loss == pytest.approx(result.final_val_loss, rel=1e-5)

    def test_linear_model_beats_baseline(self, tensors):
        torch.manual_seed(0)
        trainer = Trainer(epochs=100, device="cpu")
        result = trainer.run(build_model("linear", 12), tensors)
        assert result.train_loss_history[-1] < result.train_loss_history[0]
        assert result.test_loss < compute_baseline(tensors)

    def test_mlp_trains(self, tensors):
        torch.manual_seed(0)
        trainer = Trainer(epochs=20, device="cpu")
        result = trainer.run(build_model("mlp", 12), tensors)
        assert result.train_loss_history[-1] < result.train_loss_history[0]

    def test_zero_epochs_still_evaluates(self, tensors):
        observer = HistoryObserver("linear")
        result = Trainer(epochs=0, device="cpu", observer=observer).run(
            build_model("linear", 12), tensors
        )
        assert result.train_loss_history == []
        assert observer.points == []
        assert result.final_train_loss is not None
        assert result.test_loss is not None

    def test_from_config(self):
        trainer = Trainer.from_config(
            {"training": {"epochs": 3, "batch_size": 8, "optimizer": {"name": "adam", "lr": 0.1}}}
        )
        assert (trainer.epochs, trainer.batch_size, trainer.learning_rate) == (3, 8, 0.1)
        assert trainer.optimizer_name == "adam"

    def test_result_to_dict(self, tensors):
        result = Trainer(epochs=1, device="cpu").run(build_model("linear", 12), tensors)
        data = result.to_dict()
        assert data["epochs"] == 1
        assert set(data) >= {"train_loss_history", "val_loss_history", "test_loss"}
