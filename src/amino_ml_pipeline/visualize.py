"""Training-history, precision-recall and feature-importance plots (Agg backend)."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402


def _save(fig: Figure, output_path: str | Path | None) -> None:
    if output_path is None:
        return
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=150)


def plot_training_history(
    history: Mapping[str, Mapping[str, Sequence[float]]],
    best_iteration: int | None = None,
    output_path: str | Path | None = None,
) -> Figure:
    """
    Loss and accuracy by boosting round for each watched partition.

    ``history`` maps a partition name ("train", "validation") to its metric
    series, e.g. {"train": {"logloss": [...], "error": [...]}, ...}.
    """
    has_error = any("error" in series for series in history.values())
    n_panels = 2 if has_error else 1
    fig, axes = plt.subplots(1, n_panels, figsize=(6 * n_panels, 4.5), squeeze=False)
    loss_ax = axes[0][0]

    for name, series in history.items():
        loss = series.get("logloss")
        if loss:
            loss_ax.plot(np.arange(1, len(loss) + 1), loss, label=name)
    loss_ax.set_xlabel("Boosting round")
    loss_ax.set_ylabel("Log loss")
    loss_ax.set_title("Loss by iteration")

    if has_error:
        acc_ax = axes[0][1]
        for name, series in history.items():
            error = series.get("error")
            if error:
                accuracy = 1.0 - np.asarray(error, dtype=float)
                acc_ax.plot(np.arange(1, len(accuracy) + 1), accuracy, label=name)
        acc_ax.set_xlabel("Boosting round")
        acc_ax.set_ylabel("Accuracy")
        acc_ax.set_title("Accuracy by iteration")

    for ax in axes[0]:
        if best_iteration is not None:
            # Rounds are plotted 1-based
            ax.axvline(best_iteration + 1, color="grey", linestyle="--", label="best iteration")
        ax.legend()
        ax.grid(alpha=0.3)

    fig.tight_layout()
    _save(fig, output_path)
    return fig


def plot_precision_recall(
    y_true,
    y_prob,
    output_path: str | Path | None = None,
) -> Figure:
    """Precision-recall curve annotated with the area under it."""
    from sklearn.metrics import auc, precision_recall_curve

    precision, recall, _ = precision_recall_curve(np.asarray(y_true), np.asarray(y_prob))
    pr_auc = auc(recall, precision)
    baseline = float(np.mean(y_true))

    fig, ax = plt.subplots(figsize=(6, 5))
    ax.plot(recall, precision, label=f"PR curve (AUC = {pr_auc:.3f})")
    ax.axhline(baseline, color="grey", linestyle="--", label=f"positive rate ({baseline:.2f})")
    ax.annotate(
        f"AUC = {pr_auc:.3f}",
        xy=(0.05, 0.08),
        xycoords="axes fraction",
        fontsize=11,
        bbox={"boxstyle": "round", "facecolor": "white", "alpha": 0.8},
    )
    ax.set_xlim(0.0, 1.0)
    ax.set_ylim(0.0, 1.05)
    ax.set_xlabel("Recall")
    ax.set_ylabel("Precision")
    ax.set_title("Precision-recall curve")
    ax.legend(loc="lower right")
    ax.grid(alpha=0.3)

    fig.tight_layout()
    _save(fig, output_path)
    return fig


def plot_feature_importances(
    importances: Mapping[str, float],
    top_n: int = 30,
    output_path: str | Path | None = None,
) -> Figure:
    items = sorted(importances.items(), key=lambda kv: kv[1], reverse=True)[:top_n]
    features = [k for k, _ in items]
    values = [v for _, v in items]

    fig_height = max(4, 0.25 * len(features))
    fig, ax = plt.subplots(figsize=(10, fig_height))
    ax.barh(features[::-1], values[::-1])
    ax.set_xlabel("Importance (total gain)")
    ax.set_title("Feature importance")
    fig.tight_layout()
    _save(fig, output_path)
    return fig
