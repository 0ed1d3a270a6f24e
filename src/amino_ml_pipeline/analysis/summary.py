"""
Descriptive summaries of a loaded screening table.

Columns are treated by their schema role: the identifier only counts towards
missingness, the sex/flag fields are tabulated against the outcome, and every
amino-acid concentration is described per outcome class.

Usage:
    from amino_ml_pipeline.analysis.summary import export_summaries

    table = load_records("data/raw/amino_acids.csv")
    export_summaries(table, "output/eda").summary()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import polars as pl

from amino_ml_pipeline.data.dataset import SchemaConfig


logger = logging.getLogger(__name__)


def column_roles(columns: list[str], schema: SchemaConfig | None = None) -> dict[str, str]:
    """Map each column to id / sex / flag / outcome / dropped / concentration."""
    schema = schema or SchemaConfig()
    named = {
        schema.id_column: "id",
        schema.sex_column: "sex",
        schema.outcome_column: "outcome",
        **{col: "flag" for col in schema.flag_columns},
        **{col: "dropped" for col in schema.drop_columns},
    }
    return {col: named.get(col, "concentration") for col in columns}


def _require_outcome(df: pl.DataFrame, column: str) -> None:
    if column not in df.columns:
        raise ValueError(f"Outcome column '{column}' not found in dataframe")


# =============================================================================
# Per-role summaries
# =============================================================================

def summarize_missing(df: pl.DataFrame, schema: SchemaConfig | None = None) -> pl.DataFrame:
    """Missing count and rate per column; blank text counts as missing."""
    total = df.height
    rows = []
    for name, role in column_roles(df.columns, schema).items():
        col = pl.col(name)
        if df.schema[name] == pl.Utf8:
            col = pl.when(col.str.strip_chars() == "").then(None).otherwise(col)
        missing = df.select(col.is_null().sum()).item()
        rows.append({
            "column": name,
            "role": role,
            "missing": missing,
            "missing_rate": missing / total if total else 0.0,
        })
    return pl.DataFrame(rows)


def summarize_concentrations(df: pl.DataFrame, schema: SchemaConfig | None = None) -> pl.DataFrame:
    """
    Distribution of every concentration column within each outcome class.

    Returns one row per (feature, class) with the non-missing count, the
    missing count, mean, median, std, min and max. Features keep file order.
    """
    schema = schema or SchemaConfig()
    outcome = schema.outcome_column
    _require_outcome(df, outcome)
    features = schema.continuous_columns(df.columns)
    if not features:
        return pl.DataFrame()

    long = (
        df.select(pl.col(outcome).cast(pl.Utf8), *features)
        .with_columns(pl.col(features).cast(pl.Float64))
        .unpivot(index=outcome, on=features, variable_name="feature", value_name="value")
    )
    value = pl.col("value")
    return (
        long.group_by(["feature", outcome])
        .agg(
            value.count().alias("count"),
            value.null_count().alias("missing"),
            value.mean().alias("mean"),
            value.median().alias("median"),
            value.std().alias("std"),
            value.min().alias("min"),
            value.max().alias("max"),
        )
        .sort(pl.col("feature").cast(pl.Enum(features)), outcome)
        .rename({outcome: "class"})
    )


def summarize_categories(df: pl.DataFrame, schema: SchemaConfig | None = None) -> pl.DataFrame:
    """Counts of each sex/flag value within each outcome class, in long format."""
    schema = schema or SchemaConfig()
    outcome = schema.outcome_column
    _require_outcome(df, outcome)
    frames = [
        df.group_by([col, outcome])
        .len()
        .select(
            pl.lit(col).alias("feature"),
            pl.col(col).cast(pl.Utf8).alias("value"),
            pl.col(outcome).cast(pl.Utf8).alias("class"),
            pl.col("len").alias("count"),
        )
        .sort(["value", "class"], nulls_last=True)
        for col in schema.categorical_columns
        if col in df.columns
    ]
    if not frames:
        return pl.DataFrame()
    return pl.concat(frames)


def summarize_classes(df: pl.DataFrame, column: str) -> pl.DataFrame:
    """Row count and share per outcome class."""
    _require_outcome(df, column)
    total = df.height
    return (
        df.group_by(column)
        .len()
        .sort(column)
        .with_columns((pl.col("len") / total).alias("share"))
        .rename({column: "class", "len": "count"})
    )


# =============================================================================
# Combined report
# =============================================================================

@dataclass
class TableSummary:
    n_rows: int
    missing: pl.DataFrame
    concentrations: pl.DataFrame
    categories: pl.DataFrame
    classes: pl.DataFrame

    def summary(self) -> None:
        """Print class balance and the most incomplete columns."""
        print("=" * 50)
        print("Table Summary")
        print("=" * 50)
        print(f"Rows: {self.n_rows}")
        print(f"{'Class':<40} {'Rows':>6} {'Share':>8}")
        print("-" * 50)
        for row in self.classes.iter_rows(named=True):
            print(f"{str(row['class']):<40} {row['count']:>6d} {row['share']:>8.1%}")
        incomplete = self.missing.filter(pl.col("missing") > 0).sort("missing_rate", descending=True)
        if incomplete.height:
            print("-" * 50)
            print("Columns with missing values:")
            for row in incomplete.head(10).iter_rows(named=True):
                print(f"  {row['column']:<30} {row['role']:<14} {row['missing_rate']:>6.1%}")

    def write_csv(self, output_dir: str | Path) -> Path:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        self.missing.write_csv(output_path / "missing_rate.csv")
        self.concentrations.write_csv(output_path / "concentrations_by_class.csv")
        self.categories.write_csv(output_path / "categories_by_class.csv")
        self.classes.write_csv(output_path / "class_balance.csv")
        logger.info("Wrote table summaries to %s", output_path)
        return output_path


def summarize_table(df: pl.DataFrame, schema: SchemaConfig | None = None) -> TableSummary:
    schema = schema or SchemaConfig()
    return TableSummary(
        n_rows=df.height,
        missing=summarize_missing(df, schema),
        concentrations=summarize_concentrations(df, schema),
        categories=summarize_categories(df, schema),
        classes=summarize_classes(df, schema.outcome_column),
    )


def export_summaries(
    df: pl.DataFrame,
    output_dir: str | Path,
    schema: SchemaConfig | None = None,
) -> TableSummary:
    """Build every summary for a loaded table and write them as CSV files."""
    result = summarize_table(df, schema)
    result.write_csv(output_dir)
    return result
