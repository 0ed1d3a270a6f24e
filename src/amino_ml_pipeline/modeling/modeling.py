"""
Gradient-boosted classifier for amino-acid screening outcomes.

The booster is fit on the training partition and watches the validation
partition for early stopping; the held-out test partition is only scored.

Usage:
    from amino_ml_pipeline.config import PipelineConfig
    from amino_ml_pipeline.modeling.modeling import run_experiment

    result = run_experiment(PipelineConfig.from_csv("data/raw/amino_acids.csv"))
    result.summary()
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import polars as pl

from amino_ml_pipeline.data.dataset import SchemaConfig
from amino_ml_pipeline.data.encoding import to_matrix
from amino_ml_pipeline.modeling.evaluate import EvalResult, evaluate_classification

if TYPE_CHECKING:
    from amino_ml_pipeline.config import PipelineConfig
    from amino_ml_pipeline.data.split import PartitionTriple


logger = logging.getLogger(__name__)

_WATCH_NAMES = ("train", "validation")


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class BoosterConfig:
    """Fixed hyperparameters for the boosted trees."""

    max_depth: int = 6
    learning_rate: float = 0.1
    # Maximum boosting rounds
    n_estimators: int = 1000
    early_stopping_rounds: int = 20
    objective: str = "binary:logistic"
    # Early stopping watches the last metric
    eval_metric: tuple[str, ...] = ("error", "logloss")
    random_state: int = 42

    def to_params(self) -> dict:
        return {
            "max_depth": self.max_depth,
            "learning_rate": self.learning_rate,
            "n_estimators": self.n_estimators,
            "early_stopping_rounds": self.early_stopping_rounds,
            "objective": self.objective,
            "eval_metric": list(self.eval_metric),
            "random_state": self.random_state,
        }


@dataclass
class TrainResult:
    """Fitted booster plus its per-round training log."""

    model: object
    feature_names: list[str]
    history: dict[str, dict[str, list[float]]] = field(default_factory=dict)
    best_iteration: int | None = None
    feature_importances: dict[str, float] = field(default_factory=dict)

    @property
    def n_rounds(self) -> int:
        lengths = [len(v) for series in self.history.values() for v in series.values()]
        return max(lengths) if lengths else 0

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """Positive-class probability for each row of X."""
        return self.model.predict_proba(X)[:, 1]


@dataclass
class ExperimentResult:
    train: TrainResult
    evaluation: EvalResult
    sizes: dict[str, int]
    y_test: np.ndarray = field(default_factory=lambda: np.array([]))
    y_prob: np.ndarray = field(default_factory=lambda: np.array([]))

    @property
    def accuracy(self) -> float:
        return self.evaluation.accuracy

    def summary(self) -> None:
        """Print evaluation metrics on the test partition."""
        ev = self.evaluation
        cm = ev.confusion_matrix
        print("\n" + "=" * 60)
        print("Test Metrics (xgboost)")
        print("=" * 60)
        print(f"Partitions: train={self.sizes['train']} "
              f"validation={self.sizes['validation']} test={self.sizes['test']}")
        print(f"Boosting rounds: {self.train.n_rounds} (best iteration: {self.train.best_iteration})")

        print("\n[1] Confusion Matrix")
        print("-" * 40)
        print(f"                 Predicted")
        print(f"              Neg      Pos")
        print(f"Actual Neg   {cm.tn:4d}     {cm.fp:4d}")
        print(f"Actual Pos   {cm.fn:4d}     {cm.tp:4d}")

        print("\n[2] Threshold Metrics (cut = {:.2f})".format(ev.threshold))
        print("-" * 40)
        print(f"  Accuracy:     {ev.accuracy:.3f}")
        print(f"  Precision:    {cm.precision:.3f}")
        print(f"  Recall:       {cm.recall:.3f}")
        print(f"  Specificity:  {cm.specificity:.3f}")
        print(f"  F1 Score:     {cm.f1:.3f}")

        print("\n[3] Ranking Metrics")
        print("-" * 40)
        print(f"  PR-AUC:       {ev.pr_auc:.3f}")
        print(f"  Avg. prec.:   {ev.average_precision:.3f}")
        if ev.roc_auc is not None:
            print(f"  ROC-AUC:      {ev.roc_auc:.3f}")

        if self.train.feature_importances:
            print("\n[4] Top Features (total gain)")
            print("-" * 40)
            for name, value in list(self.train.feature_importances.items())[:10]:
                print(f"  {name:<20} {value:.4f}")
        print("=" * 60)


# =============================================================================
# Model Training
# =============================================================================

def _get_feature_importances(model: object, feature_names: list[str]) -> dict[str, float]:
    importances = {}
    if hasattr(model, "feature_importances_"):
        for name, imp in zip(feature_names, model.feature_importances_):
            importances[name] = float(imp)
    return dict(sorted(importances.items(), key=lambda x: x[1], reverse=True))


def _rename_history(raw: dict) -> dict[str, dict[str, list[float]]]:
    # xgboost names eval sets validation_0, validation_1, ... in eval_set order
    history = {}
    for i, name in enumerate(_WATCH_NAMES):
        series = raw.get(f"validation_{i}", {})
        history[name] = {metric: [float(v) for v in values] for metric, values in series.items()}
    return history


def train_booster(
    split: "PartitionTriple",
    schema: SchemaConfig | None = None,
    config: BoosterConfig | None = None,
) -> TrainResult:
    """
    Fit an XGBClassifier on the train partition with early stopping on validation.

    Args:
        split: Encoded train/validation/test partitions
        schema: Column layout (defaults to split.schema)
        config: Booster hyperparameters

    Returns:
        TrainResult with the fitted model and its per-round log
    """
    from xgboost import XGBClassifier

    schema = schema or split.schema
    config = config or BoosterConfig()

    X_train, y_train, feature_names = to_matrix(split.train, schema)
    X_val, y_val, _ = to_matrix(split.validation, schema)

    model = XGBClassifier(tree_method="hist", importance_type="total_gain", **config.to_params())
    model.fit(
        X_train, y_train,
        eval_set=[(X_train, y_train), (X_val, y_val)],
        verbose=False,
    )

    history = _rename_history(model.evals_result())
    best_iteration = getattr(model, "best_iteration", None)
    logger.info(
        "Trained %d rounds on %d rows (best iteration %s)",
        len(history["validation"].get("logloss", [])), len(y_train), best_iteration,
    )
    return TrainResult(
        model=model,
        feature_names=list(feature_names),
        history=history,
        best_iteration=None if best_iteration is None else int(best_iteration),
        feature_importances=_get_feature_importances(model, list(feature_names)),
    )


def evaluate_booster(
    result: TrainResult,
    table: pl.DataFrame,
    schema: SchemaConfig | None = None,
    threshold: float = 0.5,
) -> tuple[EvalResult, np.ndarray, np.ndarray]:
    """Score a fitted booster on an encoded table; returns (metrics, y_true, y_prob)."""
    X, y, _ = to_matrix(table, schema)
    y_prob = result.predict_proba(X)
    return evaluate_classification(y, y_prob, threshold=threshold), y, y_prob


# =============================================================================
# Experiment
# =============================================================================

def run_experiment(config: "PipelineConfig") -> ExperimentResult:
    """
    Load -> encode -> split -> train -> evaluate, printing the test accuracy.

    Artefacts (metrics, plots, importances) are written when
    ``config.output_dir`` is set.
    """
    from amino_ml_pipeline.data.dataset import load_records
    from amino_ml_pipeline.data.encoding import encode_table
    from amino_ml_pipeline.data.split import split_dataset

    print("[1/4] Loading table...")
    table = load_records(config.input_csv, schema=config.schema, separator=config.separator)
    encoded = encode_table(table, config.schema)

    print("[2/4] Splitting...")
    split = split_dataset(encoded, config.split, schema=config.schema)
    split.summary()

    print("[3/4] Training xgboost...")
    train_result = train_booster(split, config.schema, config.booster)

    print("[4/4] Evaluating on test partition...")
    evaluation, y_test, y_prob = evaluate_booster(train_result, split.test, config.schema)
    print(f"Accuracy: {evaluation.accuracy * 100.0:.2f}%")

    result = ExperimentResult(
        train=train_result,
        evaluation=evaluation,
        sizes=split.sizes(),
        y_test=y_test,
        y_prob=y_prob,
    )
    if config.output_dir is not None:
        _export_results(config, result)
    return result


def _export_results(config: "PipelineConfig", result: ExperimentResult) -> None:
    """Write metrics, plots and importances to config.output_dir."""
    import matplotlib.pyplot as plt

    from amino_ml_pipeline.visualize import (
        plot_feature_importances,
        plot_precision_recall,
        plot_training_history,
    )

    output_path = Path(config.output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    payload = {
        "input_csv": str(config.input_csv),
        "sizes": result.sizes,
        "split": {
            "train_fraction": config.split.train_fraction,
            "validation_split_fraction": config.split.validation_split_fraction,
            "seed": config.split.seed,
            "validation_seed": config.split.validation_seed,
            "stratify": config.split.stratify,
        },
        "booster": config.booster.to_params(),
        "best_iteration": result.train.best_iteration,
        "n_rounds": result.train.n_rounds,
        "metrics": result.evaluation.to_dict(),
    }
    (output_path / "metrics.json").write_text(json.dumps(payload, indent=2))

    fig = plot_training_history(
        result.train.history,
        best_iteration=result.train.best_iteration,
        output_path=output_path / "loss_curve.png",
    )
    plt.close(fig)
    fig = plot_precision_recall(
        result.y_test, result.y_prob, output_path=output_path / "precision_recall.png"
    )
    plt.close(fig)

    if result.train.feature_importances:
        imp_data = [
            {"feature": k, "importance": v}
            for k, v in result.train.feature_importances.items()
        ]
        pl.DataFrame(imp_data).write_csv(output_path / "feature_importances.csv")
        fig = plot_feature_importances(
            result.train.feature_importances,
            output_path=output_path / "feature_importances.png",
        )
        plt.close(fig)

    print(f"\nResults exported to: {output_path}")
