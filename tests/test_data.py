"""Tests for the dataset loader."""

from unittest.mock import Mock, patch

import numpy as np
import pytest
import requests

from boston_housing.core.data import (
    BASE_URL,
    BostonHousingDataset,
    fetch_csv,
    load_csv,
    shuffle,
)
from boston_housing.core.exceptions import DatasetDownloadError, DatasetFormatError


class TestFetchCsv:

    def test_downloads_and_caches(self, tmp_path):
        response = Mock()
        response.content = b"a,b\n1,2\n"
        response.raise_for_status = Mock()

        with patch("boston_housing.core.data.requests.get", return_value=response) as mock_get:
            path = fetch_csv("train-data.csv", data_dir=tmp_path)
            fetch_csv("train-data.csv", data_dir=tmp_path)

        assert mock_get.call_count == 1
        assert mock_get.call_args[0][0] == f"{BASE_URL}train-data.csv"
        assert path.read_bytes() == b"a,b\n1,2\n"

    def test_adds_trailing_slash_to_base_url(self, tmp_path):
        response = Mock(content=b"a\n1\n")
        with patch("boston_housing.core.data.requests.get", return_value=response) as mock_get:
            fetch_csv("x.csv", base_url="http://example.com/data", data_dir=tmp_path)
        assert mock_get.call_args[0][0] == "http://example.com/data/x.csv"

    def test_network_failure(self, tmp_path):
        with patch(
            "boston_housing.core.data.requests.get",
            side_effect=requests.ConnectionError("unreachable"),
        ):
            with pytest.raises(DatasetDownloadError, match="unreachable"):
                fetch_csv("train-data.csv", data_dir=tmp_path)
        assert not (tmp_path / "train-data.csv").exists()


class TestLoadCsv:

    def test_parses_header_and_rows(self, tmp_path):
        path = tmp_path / "d.csv"
        path.write_text("crim,zn\n0.5,18\n1.25,0\n")
        data, names = load_csv(path)
        assert names == ["crim", "zn"]
        assert data.dtype == np.float32
        np.testing.assert_allclose(data, [[0.5, 18.0], [1.25, 0.0]])

    def test_non_numeric_cell(self, tmp_path):
        path = tmp_path / "d.csv"
        path.write_text("a,b\n1,2\n3,x\n")
        with pytest.raises(DatasetFormatError, match="non-numeric"):
            load_csv(path)

    def test_short_row(self, tmp_path):
        path = tmp_path / "d.csv"
        path.write_text("a,b\n1,2\n3\n")
        with pytest.raises(DatasetFormatError, match="missing"):
            load_csv(path)

    def test_rows_longer_than_header(self, tmp_path):
        path = tmp_path / "d.csv"
        path.write_text("a,b\n1,2,3\n4,5,6\n")
        with pytest.raises(DatasetFormatError):
            load_csv(path)

    def test_long_row_after_valid_rows(self, tmp_path):
        path = tmp_path / "d.csv"
        path.write_text("a,b\n1,2\n3,4\n5,6,7\n")
        with pytest.raises(DatasetFormatError):
            load_csv(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "d.csv"
        path.write_text("")
        with pytest.raises(DatasetFormatError):
            load_csv(path)

    def test_header_only(self, tmp_path):
        path = tmp_path / "d.csv"
        path.write_text("a,b\n")
        with pytest.raises(DatasetFormatError, match="no data rows"):
            load_csv(path)


class TestShuffle:

    def test_keeps_rows_paired(self):
        data = np.arange(10, dtype=np.float32).reshape(5, 2)
        target = data[:, :1] * 10
        x, y = shuffle(data, target, np.random.default_rng(1))
        np.testing.assert_array_equal(x[:, :1] * 10, y)
        assert sorted(x[:, 0].tolist()) == sorted(data[:, 0].tolist())

    def test_length_mismatch(self):
        with pytest.raises(DatasetFormatError):
            shuffle(np.zeros((3, 2)), np.zeros((2, 1)), np.random.default_rng(0))


class TestBostonHousingDataset:

    def test_load_from_cache(self, csv_dir):
        with patch("boston_housing.core.data.requests.get") as mock_get:
            dataset = BostonHousingDataset(data_dir=csv_dir, seed=3).load_data()
        mock_get.assert_not_called()

        assert dataset.num_features == 12
        assert dataset.train_features.shape == (30, 12)
        assert dataset.train_target.shape == (30, 1)
        assert dataset.test_features.shape == (10, 12)
        assert dataset.feature_names[0] == "f0"

    def test_seeded_shuffle_is_reproducible(self, csv_dir):
        a = BostonHousingDataset(data_dir=csv_dir, seed=7).load_data()
        b = BostonHousingDataset(data_dir=csv_dir, seed=7).load_data()
        np.testing.assert_array_equal(a.train_features, b.train_features)

    def test_unshuffled_matches_file_order(self, csv_dir):
        dataset = BostonHousingDataset(data_dir=csv_dir, shuffle=False).load_data()
        expected, _ = load_csv(csv_dir / "train-target.csv")
        np.testing.assert_array_equal(dataset.train_target, expected)

    def test_num_features_requires_load(self):
        with pytest.raises(RuntimeError):
            BostonHousingDataset().num_features

    def test_from_arrays_rejects_mismatched_rows(self):
        with pytest.raises(DatasetFormatError, match="row count"):
            BostonHousingDataset.from_arrays(
                np.zeros((4, 3)), np.zeros(3), np.zeros((2, 3)), np.zeros(2)
            )

    def test_from_arrays_rejects_feature_mismatch(self):
        with pytest.raises(DatasetFormatError, match="feature count"):
            BostonHousingDataset.from_arrays(
                np.zeros((4, 3)), np.zeros(4), np.zeros((2, 2)), np.zeros(2)
            )

    def test_from_arrays_reshapes_targets(self):
        dataset = BostonHousingDataset.from_arrays(
            np.zeros((4, 3)), np.arange(4), np.zeros((2, 3)), np.arange(2)
        )
        assert dataset.train_target.shape == (4, 1)
        assert dataset.feature_names == ["x0", "x1", "x2"]
