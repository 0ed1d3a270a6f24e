"""
Test-partition metrics for binary screening predictions.

Usage:
    from amino_ml_pipeline.modeling.evaluate import evaluate_classification

    result = evaluate_classification(y_test, y_prob)
    print(result.accuracy, result.pr_auc)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

import numpy as np


@dataclass
class ConfusionMatrixMetrics:
    """Metrics derived from confusion matrix."""

    tn: int = 0
    fp: int = 0
    fn: int = 0
    tp: int = 0

    @property
    def precision(self) -> float:
        """TP / (TP + FP)"""
        return self.tp / (self.tp + self.fp) if (self.tp + self.fp) > 0 else 0.0

    @property
    def recall(self) -> float:
        """TP / (TP + FN) - also called Sensitivity"""
        return self.tp / (self.tp + self.fn) if (self.tp + self.fn) > 0 else 0.0

    @property
    def specificity(self) -> float:
        """TN / (TN + FP)"""
        return self.tn / (self.tn + self.fp) if (self.tn + self.fp) > 0 else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if (p + r) > 0 else 0.0

    def as_matrix(self) -> np.ndarray:
        return np.array([[self.tn, self.fp], [self.fn, self.tp]])


@dataclass
class EvalResult:
    accuracy: float
    pr_auc: float
    average_precision: float
    roc_auc: float | None
    threshold: float
    confusion_matrix: ConfusionMatrixMetrics = field(default_factory=ConfusionMatrixMetrics)

    @property
    def metrics(self) -> dict[str, float]:
        cm = self.confusion_matrix
        out = {
            "accuracy": self.accuracy,
            "pr_auc": self.pr_auc,
            "average_precision": self.average_precision,
            "precision": cm.precision,
            "recall": cm.recall,
            "specificity": cm.specificity,
            "f1": cm.f1,
            "threshold": self.threshold,
        }
        if self.roc_auc is not None:
            out["roc_auc"] = self.roc_auc
        return out

    def to_dict(self) -> dict:
        payload = self.metrics
        payload["confusion_matrix"] = asdict(self.confusion_matrix)
        return payload


def _validate(y_true: np.ndarray, y_prob: np.ndarray) -> None:
    if y_true.shape != y_prob.shape:
        raise ValueError(
            f"y_true and y_prob must have the same shape, got {y_true.shape} and {y_prob.shape}"
        )
    if y_true.size == 0:
        raise ValueError("Cannot evaluate an empty prediction set")
    # Checked before any integer cast so that e.g. 0.7 is not truncated to 0
    is_binary = np.isin(y_true, [0, 1])
    if not is_binary.all():
        bad = np.unique(y_true[~is_binary].astype(str)).tolist()
        raise ValueError(f"y_true must be binary 0/1, got label(s) {', '.join(bad)}")


def evaluate_classification(y_true, y_prob, threshold: float = 0.5) -> EvalResult:
    """
    Score positive-class probabilities against binary labels.

    Accuracy uses ``threshold`` as the decision cut; the PR-AUC is the
    trapezoidal area under the precision-recall curve.
    """
    from sklearn.metrics import (
        accuracy_score, auc, average_precision_score, confusion_matrix,
        precision_recall_curve, roc_auc_score,
    )

    y_true = np.asarray(y_true).ravel()
    y_prob = np.asarray(y_prob, dtype=float).ravel()
    _validate(y_true, y_prob)
    y_true = y_true.astype(int)

    y_pred = (y_prob >= threshold).astype(int)
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()

    precision, recall, _ = precision_recall_curve(y_true, y_prob)
    both_classes = len(np.unique(y_true)) > 1

    return EvalResult(
        accuracy=float(accuracy_score(y_true, y_pred)),
        pr_auc=float(auc(recall, precision)),
        average_precision=float(average_precision_score(y_true, y_prob)),
        roc_auc=float(roc_auc_score(y_true, y_prob)) if both_classes else None,
        threshold=threshold,
        confusion_matrix=ConfusionMatrixMetrics(tn=int(tn), fp=int(fp), fn=int(fn), tp=int(tp)),
    )
