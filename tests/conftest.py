"""Pytest configuration and fixtures.

Synthetic screening tables shared by the test modules.
"""

from pathlib import Path

import numpy as np
import polars as pl
import pytest

NORMAL = "No.significant.abnormality.detected."
ABNORMAL = "X.Abnormal"


def make_raw_table(n_rows: int, positive_share: float = 0.5, seed: int = 0) -> pl.DataFrame:
    """Unencoded table where high Phe separates abnormal rows."""
    rng = np.random.default_rng(seed)
    n_pos = int(round(n_rows * positive_share))
    labels = np.array([1] * n_pos + [0] * (n_rows - n_pos))
    rng.shuffle(labels)
    phe = np.where(labels == 1, rng.normal(150.0, 10.0, n_rows), rng.normal(50.0, 5.0, n_rows))
    return pl.DataFrame({
        "ID": [f"P{i:04d}" for i in range(n_rows)],
        "SEX": [["F", "M", "U"][i % 3] for i in range(n_rows)],
        "Ala": rng.normal(300.0, 40.0, n_rows).round(2),
        "Phe": phe.round(2),
        "Tyr": rng.normal(70.0, 10.0, n_rows).round(2),
        "ASA": [["N", "Y"][i % 2] for i in range(n_rows)],
        "CLASS": [ABNORMAL if v == 1 else NORMAL for v in labels],
    })


def encoded_table(n_rows: int, positive_share: float = 0.5) -> pl.DataFrame:
    """Already-encoded table with an integer ID column for overlap checks."""
    n_pos = int(round(n_rows * positive_share))
    return pl.DataFrame({
        "ID": list(range(n_rows)),
        "SEX": [i % 3 for i in range(n_rows)],
        "Phe": [float(i) for i in range(n_rows)],
        "ASA": [i % 2 for i in range(n_rows)],
        "CLASS": [1 if i < n_pos else 0 for i in range(n_rows)],
    })


@pytest.fixture
def small_table() -> pl.DataFrame:
    """Ten-row raw table with every category present."""
    return make_raw_table(10)


@pytest.fixture
def separable_table() -> pl.DataFrame:
    return make_raw_table(200, seed=7)


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write a DataFrame to a CSV file under tmp_path and return the path."""

    def _write(df: pl.DataFrame, name: str = "amino_acids.csv") -> Path:
        path = tmp_path / name
        df.write_csv(path)
        return path

    return _write
