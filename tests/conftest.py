"""Shared fixtures: a small synthetic stand-in for the Boston Housing data."""

import sys

import numpy as np
import pytest
from loguru import logger

from boston_housing.core.context import arrays_to_tensors
from boston_housing.core.data import BostonHousingDataset

NUM_FEATURES = 12


def make_arrays(n_train=80, n_test=20, seed=0):
    rng = np.random.default_rng(seed)
    weights = rng.normal(size=(NUM_FEATURES, 1))
    scales = rng.uniform(0.5, 50.0, size=NUM_FEATURES)
    offsets = rng.uniform(-10.0, 100.0, size=NUM_FEATURES)

    def split(n):
        x = rng.normal(size=(n, NUM_FEATURES)) * scales + offsets
        y = ((x - offsets) / scales) @ weights + 22.0 + rng.normal(scale=0.5, size=(n, 1))
        return x.astype(np.float32), y.astype(np.float32)

    train_x, train_y = split(n_train)
    test_x, test_y = split(n_test)
    return train_x, train_y, test_x, test_y


@pytest.fixture(autouse=True)
def reset_logger():
    """The CLI swaps loguru sinks; restore a plain stderr sink after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def dataset():
    return BostonHousingDataset.from_arrays(*make_arrays())


@pytest.fixture
def tensors(dataset):
    return arrays_to_tensors(dataset)


@pytest.fixture
def csv_dir(tmp_path):
    """Directory holding the four CSV resources, as if already downloaded."""
    train_x, train_y, test_x, test_y = make_arrays(n_train=30, n_test=10)
    header = ",".join(f"f{i}" for i in range(NUM_FEATURES))
    np.savetxt(tmp_path / "train-data.csv", train_x, delimiter=",", header=header, comments="")
    np.savetxt(tmp_path / "train-target.csv", train_y, delimiter=",", header="medv", comments="")
    np.savetxt(tmp_path / "test-data.csv", test_x, delimiter=",", header=header, comments="")
    np.savetxt(tmp_path / "test-target.csv", test_y, delimiter=",", header="medv", comments="")
    return tmp_path
