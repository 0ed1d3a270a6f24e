"""Command-line entry point: ``amino-ml run | split | summarize``."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from amino_ml_pipeline.analysis.summary import export_summaries
from amino_ml_pipeline.config import PipelineConfig
from amino_ml_pipeline.data.dataset import SchemaConfig, load_records
from amino_ml_pipeline.data.encoding import encode_table
from amino_ml_pipeline.data.split import SplitConfig, split_dataset
from amino_ml_pipeline.modeling.modeling import BoosterConfig, run_experiment


def _parse_columns_arg(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _schema_from_args(args: argparse.Namespace) -> SchemaConfig:
    return SchemaConfig(
        id_column=args.id_column,
        sex_column=args.sex_column,
        flag_columns=_parse_columns_arg(args.flag_columns),
        outcome_column=args.outcome_column,
        drop_columns=_parse_columns_arg(args.drop_columns),
    )


def _split_from_args(args: argparse.Namespace) -> SplitConfig:
    return SplitConfig(
        train_fraction=args.train_fraction,
        validation_split_fraction=args.validation_split_fraction,
        seed=args.seed,
        validation_seed=args.validation_seed,
        stratify=args.stratify,
    )


def cmd_run(args: argparse.Namespace) -> None:
    booster = BoosterConfig(
        max_depth=args.max_depth,
        learning_rate=args.learning_rate,
        n_estimators=args.n_estimators,
        early_stopping_rounds=args.early_stopping_rounds,
        random_state=args.seed,
    )
    config = PipelineConfig.from_csv(
        args.input_csv,
        output_dir=args.output_dir or None,
        schema=_schema_from_args(args),
        split=_split_from_args(args),
        booster=booster,
        separator=args.separator,
    )
    result = run_experiment(config)
    result.summary()


def cmd_split(args: argparse.Namespace) -> None:
    schema = _schema_from_args(args)
    table = load_records(args.input_csv, schema=schema, separator=args.separator)
    split = split_dataset(encode_table(table, schema), _split_from_args(args), schema=schema)
    output_path = Path(args.output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    for part in ("train", "validation", "test"):
        getattr(split, part).write_csv(output_path / f"{part}.csv")
    (output_path / "split.json").write_text(json.dumps(split.sizes(), indent=2))
    split.summary()


def cmd_summarize(args: argparse.Namespace) -> None:
    schema = _schema_from_args(args)
    table = load_records(args.input_csv, schema=schema, separator=args.separator)
    export_summaries(table, args.output_dir, schema=schema).summary()
    print(f"Wrote summaries to: {args.output_dir}")


def _add_table_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input-csv", required=True)
    parser.add_argument("--separator", default=",")
    parser.add_argument("--id-column", default="ID")
    parser.add_argument("--sex-column", default="SEX")
    parser.add_argument("--flag-columns", default="ASA", help="Comma-separated N/Y columns")
    parser.add_argument("--outcome-column", default="CLASS")
    parser.add_argument("--drop-columns", default="", help="Comma-separated columns kept out of the features")


def _add_split_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--train-fraction", type=float, default=0.8)
    parser.add_argument("--validation-split-fraction", type=float, default=0.8,
                        help="Share of the training part kept for fitting")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--validation-seed", type=int, default=None,
                        help="Seed for the train/validation split (default: reuse --seed)")
    parser.add_argument("--stratify", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Amino-acid screening ML pipeline")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="load, split, train xgboost and report test metrics")
    _add_table_args(run)
    _add_split_args(run)
    run.add_argument("--output-dir", default="", help="Default: <input stem>_ml_pipeline next to the input")
    run.add_argument("--max-depth", type=int, default=6)
    run.add_argument("--learning-rate", type=float, default=0.1)
    run.add_argument("--n-estimators", type=int, default=1000, help="Maximum boosting rounds")
    run.add_argument("--early-stopping-rounds", type=int, default=20)
    run.set_defaults(func=cmd_run)

    split = sub.add_parser("split", help="write encoded train/validation/test CSVs")
    _add_table_args(split)
    _add_split_args(split)
    split.add_argument("--output-dir", required=True)
    split.set_defaults(func=cmd_split)

    summarize = sub.add_parser("summarize", help="missing rates, per-class distributions and class balance")
    _add_table_args(summarize)
    summarize.add_argument("--output-dir", required=True)
    summarize.set_defaults(func=cmd_summarize)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
