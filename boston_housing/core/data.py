"""
Data loading utilities for the Boston Housing dataset.

The dataset is served as four CSV resources (train/test features and
targets). Each resource has a header row followed by numeric rows. Files are
downloaded once and cached under ``data_dir``.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import requests
from loguru import logger

from .exceptions import DatasetDownloadError, DatasetFormatError

BASE_URL = "https://storage.googleapis.com/tfjs-examples/multivariate-linear-regression/data/"

TRAIN_FEATURES_FN = "train-data.csv"
TRAIN_TARGET_FN = "train-target.csv"
TEST_FEATURES_FN = "test-data.csv"
TEST_TARGET_FN = "test-target.csv"


def fetch_csv(
    filename: str,
    base_url: str = BASE_URL,
    data_dir: Union[str, Path] = "./data",
    timeout: float = 30.0,
) -> Path:
    """
    Download a CSV resource unless it is already cached.

    Args:
        filename: Resource name relative to ``base_url``
        base_url: Remote directory holding the resources
        data_dir: Local cache directory
        timeout: Request timeout in seconds

    Returns:
        Path to the cached file
    """
    data_dir = Path(data_dir)
    path = data_dir / filename
    if path.exists():
        logger.debug(f"Using cached {path}")
        return path

    url = base_url if base_url.endswith("/") else f"{base_url}/"
    url = f"{url}{filename}"
    logger.info(f"Downloading {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DatasetDownloadError(url, str(e)) from e

    data_dir.mkdir(parents=True, exist_ok=True)
    path.write_bytes(response.content)
    return path


def load_csv(path: Union[str, Path]) -> Tuple[np.ndarray, List[str]]:
    """
    Parse a CSV resource into a float matrix.

    Args:
        path: CSV file with a header row

    Returns:
        Tuple of (rows x columns float32 array, column names)

    Raises:
        DatasetFormatError: If a row's field count differs from the header,
            or a cell is missing or non-numeric
    """
    # The header is read as an ordinary row so it fixes the field count:
    # longer rows fail in the tokenizer, shorter ones come back with NaN.
    try:
        raw = pd.read_csv(path, header=None, index_col=False, dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DatasetFormatError(f"{path}: {e}") from e

    names = [str(c).strip() for c in raw.iloc[0]]
    frame = raw.iloc[1:].reset_index(drop=True)
    frame.columns = names

    if frame.empty:
        raise DatasetFormatError(f"{path}: no data rows")

    if frame.isnull().values.any():
        raise DatasetFormatError(f"{path}: missing values")

    try:
        frame = frame.apply(pd.to_numeric)
    except (ValueError, TypeError) as e:
        raise DatasetFormatError(f"{path}: non-numeric value ({e})") from e

    return frame.to_numpy(dtype=np.float32), names


def shuffle(
    data: np.ndarray, target: np.ndarray, rng: np.random.Generator
) -> Tuple[np.ndarray, np.ndarray]:
    """Shuffle rows of ``data`` and ``target`` with the same permutation."""
    if len(data) != len(target):
        raise DatasetFormatError(
            f"Feature/target row count mismatch: {len(data)} vs {len(target)}"
        )
    order = rng.permutation(len(data))
    return data[order], target[order]


class BostonHousingDataset:
    """
    Boston Housing train/test splits.

    Features have 12 numeric housing attributes per row; targets are the
    median home value as a single column.

    Example:
        dataset = BostonHousingDataset(data_dir="./data", seed=42)
        dataset.load_data()
        print(dataset.num_features)
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        data_dir: Union[str, Path] = "./data",
        seed: Optional[int] = None,
        shuffle: bool = True,
        timeout: float = 30.0,
    ):
        self.base_url = base_url
        self.data_dir = Path(data_dir)
        self.seed = seed
        self.shuffle = shuffle
        self.timeout = timeout

        self.train_features: Optional[np.ndarray] = None
        self.train_target: Optional[np.ndarray] = None
        self.test_features: Optional[np.ndarray] = None
        self.test_target: Optional[np.ndarray] = None
        self.feature_names: List[str] = []

    @classmethod
    def from_arrays(
        cls,
        train_features,
        train_target,
        test_features,
        test_target,
        feature_names: Optional[List[str]] = None,
    ) -> "BostonHousingDataset":
        """Build a dataset from in-memory arrays instead of downloading."""
        dataset = cls(shuffle=False)
        dataset._set_splits(
            np.asarray(train_features, dtype=np.float32),
            np.asarray(train_target, dtype=np.float32),
            np.asarray(test_features, dtype=np.float32),
            np.asarray(test_target, dtype=np.float32),
            feature_names,
        )
        return dataset

    @property
    def is_loaded(self) -> bool:
        return self.train_features is not None

    @property
    def num_features(self) -> int:
        if not self.is_loaded:
            raise RuntimeError("Dataset not loaded; call load_data() first")
        return int(self.train_features.shape[1])

    def load_data(self) -> "BostonHousingDataset":
        """Fetch, parse and (optionally) shuffle all four resources."""
        paths = [
            fetch_csv(fn, self.base_url, self.data_dir, self.timeout)
            for fn in (TRAIN_FEATURES_FN, TRAIN_TARGET_FN, TEST_FEATURES_FN, TEST_TARGET_FN)
        ]
        (train_x, names), (train_y, _), (test_x, _), (test_y, _) = [load_csv(p) for p in paths]

        if self.shuffle:
            rng = np.random.default_rng(self.seed)
            train_x, train_y = shuffle(train_x, train_y, rng)
            test_x, test_y = shuffle(test_x, test_y, rng)

        self._set_splits(train_x, train_y, test_x, test_y, names)
        logger.info(
            f"Loaded {len(train_x)} train / {len(test_x)} test rows, "
            f"{self.num_features} features"
        )
        return self

    def _set_splits(self, train_x, train_y, test_x, test_y, feature_names):
        train_y = train_y.reshape(-1, 1)
        test_y = test_y.reshape(-1, 1)

        if train_x.ndim != 2 or test_x.ndim != 2:
            raise DatasetFormatError("Feature data must be two-dimensional")
        if train_x.shape[1] != test_x.shape[1]:
            raise DatasetFormatError(
                f"Train/test feature count mismatch: {train_x.shape[1]} vs {test_x.shape[1]}"
            )
        if len(train_x) != len(train_y):
            raise DatasetFormatError(
                f"Train feature/target row count mismatch: {len(train_x)} vs {len(train_y)}"
            )
        if len(test_x) != len(test_y):
            raise DatasetFormatError(
                f"Test feature/target row count mismatch: {len(test_x)} vs {len(test_y)}"
            )

        self.train_features = train_x
        self.train_target = train_y
        self.test_features = test_x
        self.test_target = test_y
        self.feature_names = list(feature_names or [f"x{i}" for i in range(train_x.shape[1])])
