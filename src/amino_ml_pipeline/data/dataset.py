"""
Loader for amino-acid screening records.

Reads the row-per-patient CSV into a polars DataFrame, validates the fixed
schema and casts the amino-acid concentration columns to floats. Categorical
columns stay as stripped strings until they are encoded.

Usage:
    from amino_ml_pipeline.data.dataset import load_dataset

    split = load_dataset("data/raw/amino_acids.csv")
    split.summary()
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import polars as pl

if TYPE_CHECKING:
    from amino_ml_pipeline.data.split import PartitionTriple, SplitConfig


logger = logging.getLogger(__name__)

# polars renames a repeated header to "<name>_duplicated_<n>"
_DUPLICATE_HEADER = re.compile(r"(.+)_duplicated_\d+")


class DatasetError(ValueError):
    """Input table is malformed or does not match the expected schema."""


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class SchemaConfig:
    """Column layout of the screening table."""

    id_column: str = "ID"
    sex_column: str = "SEX"
    flag_columns: tuple[str, ...] = ("ASA",)
    outcome_column: str = "CLASS"
    # Extra columns to keep out of the feature view
    drop_columns: tuple[str, ...] = ()

    @property
    def categorical_columns(self) -> tuple[str, ...]:
        return (self.sex_column, *self.flag_columns)

    @property
    def string_columns(self) -> tuple[str, ...]:
        return (self.id_column, *self.categorical_columns, self.outcome_column)

    @property
    def required_columns(self) -> tuple[str, ...]:
        return (*self.string_columns, *self.drop_columns)

    def continuous_columns(self, columns: list[str]) -> list[str]:
        """Every column that is not named in the schema is a concentration."""
        named = set(self.required_columns)
        return [col for col in columns if col not in named]


# =============================================================================
# Loading
# =============================================================================

def _check_columns(df: pl.DataFrame, schema: SchemaConfig, source: Path) -> None:
    duplicated = sorted({
        match.group(1)
        for match in map(_DUPLICATE_HEADER.fullmatch, df.columns)
        if match and match.group(1) in df.columns
    })
    if duplicated:
        raise DatasetError(f"{source}: duplicate column name(s): {', '.join(duplicated)}")
    missing = [col for col in schema.required_columns if col not in df.columns]
    if missing:
        raise DatasetError(f"{source}: missing required column(s): {', '.join(missing)}")
    if not schema.continuous_columns(df.columns):
        raise DatasetError(f"{source}: no concentration columns found")


def _cast_continuous(df: pl.DataFrame, columns: list[str], source: Path) -> pl.DataFrame:
    out = df
    for col in columns:
        text = pl.col(col).cast(pl.Utf8).str.strip_chars()
        raw = out.select(pl.when(text == "").then(None).otherwise(text).alias(col)).to_series()
        cast = raw.cast(pl.Float64, strict=False)
        bad = raw.filter(raw.is_not_null() & cast.is_null())
        if len(bad):
            sample = ", ".join(sorted({str(v) for v in bad.to_list()})[:5])
            raise DatasetError(f"{source}: column '{col}' has non-numeric values: {sample}")
        out = out.with_columns(cast.alias(col))
    return out


def load_records(
    path: str | Path,
    schema: SchemaConfig | None = None,
    separator: str = ",",
) -> pl.DataFrame:
    """
    Read the screening table from a CSV file.

    Args:
        path: CSV file with one row per patient
        schema: Column layout (defaults to SchemaConfig())
        separator: Field separator

    Returns:
        DataFrame with string categorical/outcome columns and Float64
        concentration columns, in file order.

    Raises:
        FileNotFoundError: if the file does not exist
        DatasetError: if the file cannot be parsed or the schema does not match
    """
    path = Path(path)
    schema = schema or SchemaConfig()
    if not path.is_file():
        raise FileNotFoundError(f"Input table not found: {path}")

    try:
        # Read everything as text first; casting is done per column below
        df = pl.read_csv(path, separator=separator, infer_schema_length=0)
    except (
        pl.exceptions.ComputeError,
        pl.exceptions.NoDataError,
        pl.exceptions.DuplicateError,
    ) as exc:
        raise DatasetError(f"{path}: could not parse CSV ({exc})") from exc

    if df.is_empty():
        raise DatasetError(f"{path}: table has no rows")
    _check_columns(df, schema, path)

    df = df.with_columns(
        [pl.col(col).str.strip_chars().alias(col) for col in schema.string_columns]
    )
    df = _cast_continuous(df, schema.continuous_columns(df.columns), path)
    logger.info("Loaded %d rows x %d columns from %s", df.height, df.width, path)
    return df


# =============================================================================
# Convenience Function
# =============================================================================

@dataclass
class DatasetConfig:
    """Loader + partition settings for load_dataset()."""

    schema: SchemaConfig = field(default_factory=SchemaConfig)
    split: "SplitConfig | None" = None
    separator: str = ","


def load_dataset(
    path: str | Path,
    config: DatasetConfig | None = None,
) -> "PartitionTriple":
    """
    Load, encode and partition a screening table in one call.

    Args:
        path: CSV file with one row per patient
        config: Loader and split configuration

    Returns:
        PartitionTriple with encoded train/validation/test tables
    """
    from amino_ml_pipeline.data.encoding import encode_table
    from amino_ml_pipeline.data.split import SplitConfig, split_dataset

    config = config or DatasetConfig()
    table = load_records(path, schema=config.schema, separator=config.separator)
    encoded = encode_table(table, config.schema)
    return split_dataset(encoded, config.split or SplitConfig(), schema=config.schema)
