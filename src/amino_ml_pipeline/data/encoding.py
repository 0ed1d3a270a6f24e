"""
Integer encoding of the categorical and outcome columns.

Codes come from fixed lookup tables; any value without a code is an error
rather than a silent null.

Usage:
    from amino_ml_pipeline.data.encoding import encode_table, to_matrix

    encoded = encode_table(table)
    X, y, feature_names = to_matrix(encoded)
"""

from __future__ import annotations

import logging
from typing import Mapping

import numpy as np
import polars as pl

from amino_ml_pipeline.data.dataset import DatasetError, SchemaConfig


logger = logging.getLogger(__name__)


SEX_CODES: dict[str, int] = {"F": 0, "M": 1, "U": 2}
FLAG_CODES: dict[str, int] = {"N": 0, "Y": 1}
LABEL_CODES: dict[str, int] = {
    "No.significant.abnormality.detected.": 0,
    "X.Abnormal": 1,
}

CATEGORY_MAPPINGS: dict[str, dict[str, int]] = {
    "SEX": SEX_CODES,
    "ASA": FLAG_CODES,
}


class UnmappedCategoryError(DatasetError):
    """A categorical column holds a value that has no integer code."""

    def __init__(self, column: str, values: list):
        self.column = column
        self.values = values
        shown = ", ".join("<null>" if v is None else repr(v) for v in values)
        super().__init__(f"Column '{column}' has unmapped value(s): {shown}")


def build_category_mappings(schema: SchemaConfig) -> dict[str, dict[str, int]]:
    """Field -> code table for the categorical columns of a schema."""
    mappings = {schema.sex_column: SEX_CODES}
    for col in schema.flag_columns:
        mappings[col] = FLAG_CODES
    return mappings


def _encode_column(df: pl.DataFrame, column: str, codes: Mapping[str, int]) -> pl.Expr:
    if column not in df.columns:
        raise DatasetError(f"Column '{column}' not found in table")
    values = df.get_column(column)
    # Codes are keyed by text; compare on the text form whatever the column dtype
    text = values.cast(pl.Utf8)
    unmapped = values.filter(~text.is_in(list(codes)) | text.is_null())
    if len(unmapped):
        seen = unmapped.unique(maintain_order=True).to_list()
        raise UnmappedCategoryError(column, seen)
    return (
        pl.col(column)
        .cast(pl.Utf8)
        .replace_strict(dict(codes), return_dtype=pl.Int64)
        .alias(column)
    )


def encode_categoricals(
    table: pl.DataFrame,
    mappings: Mapping[str, Mapping[str, int]] = CATEGORY_MAPPINGS,
) -> pl.DataFrame:
    """
    Replace categorical text values with their integer codes.

    Returns a new DataFrame with the same rows and columns; columns not named
    in ``mappings`` are untouched.

    Raises:
        UnmappedCategoryError: if a value (or null) has no code
        DatasetError: if a mapped column is missing
    """
    exprs = [_encode_column(table, col, codes) for col, codes in mappings.items()]
    if not exprs:
        return table
    return table.with_columns(exprs)


def encode_label(
    table: pl.DataFrame,
    column: str,
    mapping: Mapping[str, int] = LABEL_CODES,
) -> pl.DataFrame:
    """Map the textual outcome label to 0/1."""
    return table.with_columns(_encode_column(table, column, mapping))


def encode_table(table: pl.DataFrame, schema: SchemaConfig | None = None) -> pl.DataFrame:
    """Encode categorical fields and the outcome label of a loaded table."""
    schema = schema or SchemaConfig()
    out = encode_categoricals(table, build_category_mappings(schema))
    out = encode_label(out, schema.outcome_column)
    logger.debug("Encoded columns: %s", [*schema.categorical_columns, schema.outcome_column])
    return out


# =============================================================================
# Feature / label views
# =============================================================================

def feature_view(table: pl.DataFrame, schema: SchemaConfig | None = None) -> pl.DataFrame:
    """Model inputs: everything except the identifier, outcome and dropped columns."""
    schema = schema or SchemaConfig()
    excluded = {schema.id_column, schema.outcome_column, *schema.drop_columns}
    return table.select([col for col in table.columns if col not in excluded])


def label_view(table: pl.DataFrame, schema: SchemaConfig | None = None) -> pl.Series:
    schema = schema or SchemaConfig()
    return table.get_column(schema.outcome_column)


def to_matrix(
    table: pl.DataFrame,
    schema: SchemaConfig | None = None,
) -> tuple[np.ndarray, np.ndarray, list[str]]:
    """Return X (float), y (int) and the feature names of an encoded table."""
    features = feature_view(table, schema)
    non_numeric = [
        name for name, dtype in zip(features.columns, features.dtypes)
        if not dtype.is_numeric()
    ]
    if non_numeric:
        raise DatasetError(
            f"Table is not fully encoded; non-numeric feature(s): {', '.join(non_numeric)}"
        )
    X = features.cast(pl.Float64).to_numpy()
    y = label_view(table, schema).cast(pl.Int64).to_numpy()
    return X, y, features.columns
