"""
Seeded train/validation/test partitioning.

Every split takes its seed as an argument; nothing here touches global random
state, so a (table, fraction, seed) triple always yields the same partitions.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
import polars as pl

from amino_ml_pipeline.data.dataset import SchemaConfig


logger = logging.getLogger(__name__)

_ROW_INDEX = "__row_index"


@dataclass
class SplitConfig:
    """Configuration for the two sequential splits."""

    # Share of the full table kept for training (rest is test)
    train_fraction: float = 0.8
    # Share of the training part kept for fitting (rest is validation)
    validation_split_fraction: float = 0.8
    seed: int = 42
    # None reuses `seed` for the second split, as the source workflow did
    validation_seed: int | None = None
    stratify: bool = False


def train_size(n_rows: int, train_fraction: float) -> int:
    """Number of training rows: train_fraction * n_rows, rounded half up."""
    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
    return int(math.floor(train_fraction * n_rows + 0.5))


def partition(
    table: pl.DataFrame,
    train_fraction: float,
    seed: int,
    *,
    stratify_on: str | None = None,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """
    Split a table into disjoint (train, holdout) parts.

    Args:
        table: Encoded table
        train_fraction: Share of rows assigned to train, in (0, 1)
        seed: Random seed for the row draw
        stratify_on: Optional column whose class proportions are preserved

    Returns:
        (train, holdout); each keeps the source row order.

    Raises:
        ValueError: on an out-of-range fraction or if a side would be empty
    """
    from sklearn.model_selection import train_test_split

    n_rows = table.height
    n_train = train_size(n_rows, train_fraction)
    n_holdout = n_rows - n_train
    if n_train == 0 or n_holdout == 0:
        raise ValueError(
            f"Cannot split {n_rows} row(s) with train_fraction={train_fraction}: "
            f"partition sizes would be {n_train}/{n_holdout}"
        )

    stratify = None
    if stratify_on is not None:
        stratify = table.get_column(stratify_on).to_numpy()

    indices = np.arange(n_rows)
    train_idx, holdout_idx = train_test_split(
        indices,
        train_size=n_train,
        test_size=n_holdout,
        random_state=seed,
        shuffle=True,
        stratify=stratify,
    )

    indexed = table.with_row_index(_ROW_INDEX)
    train = indexed.filter(pl.col(_ROW_INDEX).is_in(train_idx.tolist())).drop(_ROW_INDEX)
    holdout = indexed.filter(pl.col(_ROW_INDEX).is_in(holdout_idx.tolist())).drop(_ROW_INDEX)
    return train, holdout


@dataclass
class PartitionTriple:
    """Disjoint train/validation/test tables drawn from one source table."""

    train: pl.DataFrame
    validation: pl.DataFrame
    test: pl.DataFrame
    schema: SchemaConfig

    def sizes(self) -> dict[str, int]:
        return {
            "train": self.train.height,
            "validation": self.validation.height,
            "test": self.test.height,
        }

    def positive_rate(self, part: str) -> float:
        table = getattr(self, part)
        if table.is_empty():
            return 0.0
        return float(table.get_column(self.schema.outcome_column).mean())

    def summary(self) -> None:
        """Print partition sizes and outcome balance."""
        total = sum(self.sizes().values())
        print("=" * 50)
        print("Partition Summary")
        print("=" * 50)
        print(f"{'Part':<12} {'Rows':>6} {'Share':>8} {'Pos rate':>10}")
        print("-" * 50)
        for part, rows in self.sizes().items():
            share = rows / total if total else 0.0
            print(f"{part:<12} {rows:>6d} {share:>8.1%} {self.positive_rate(part):>10.1%}")
        print("-" * 50)
        print(f"{'total':<12} {total:>6d}")


def split_dataset(
    table: pl.DataFrame,
    config: SplitConfig | None = None,
    schema: SchemaConfig | None = None,
) -> PartitionTriple:
    """
    Source -> (train_full, test), then train_full -> (train, validation).

    Both splits use ``config.seed`` unless ``config.validation_seed`` is given.
    """
    config = config or SplitConfig()
    schema = schema or SchemaConfig()
    stratify_on = schema.outcome_column if config.stratify else None

    train_full, test = partition(
        table, config.train_fraction, config.seed, stratify_on=stratify_on
    )
    second_seed = config.seed if config.validation_seed is None else config.validation_seed
    train, validation = partition(
        train_full, config.validation_split_fraction, second_seed, stratify_on=stratify_on
    )
    logger.info(
        "Split %d rows into train=%d validation=%d test=%d (seeds %d/%d)",
        table.height, train.height, validation.height, test.height, config.seed, second_seed,
    )
    return PartitionTriple(train=train, validation=validation, test=test, schema=schema)
