"""Tests for booster training and the end-to-end experiment."""

import json

import numpy as np
import pytest

from amino_ml_pipeline.config import PipelineConfig
from amino_ml_pipeline.data.encoding import encode_table
from amino_ml_pipeline.data.split import SplitConfig, split_dataset
from amino_ml_pipeline.modeling.modeling import (
    BoosterConfig,
    TrainResult,
    evaluate_booster,
    run_experiment,
    train_booster,
)

FAST_BOOSTER = BoosterConfig(max_depth=3, n_estimators=100, early_stopping_rounds=5)


@pytest.fixture
def separable_split(separable_table):
    return split_dataset(encode_table(separable_table), SplitConfig(seed=3))


class TestBoosterConfig:
    """Tests for BoosterConfig."""

    def test_defaults(self):
        params = BoosterConfig().to_params()
        assert params["objective"] == "binary:logistic"
        assert params["eval_metric"] == ["error", "logloss"]
        assert params["early_stopping_rounds"] == 20


class TestTrainBooster:
    """Tests for train_booster()."""

    def test_returns_history(self, separable_split):
        result = train_booster(separable_split, config=FAST_BOOSTER)
        assert isinstance(result, TrainResult)
        assert set(result.history) == {"train", "validation"}
        for series in result.history.values():
            assert set(series) == {"error", "logloss"}
            assert len(series["logloss"]) == result.n_rounds
        assert 0 < result.n_rounds <= FAST_BOOSTER.n_estimators

    def test_early_stopping(self, separable_split):
        result = train_booster(separable_split, config=FAST_BOOSTER)
        assert result.best_iteration is not None
        assert result.best_iteration < result.n_rounds

    def test_feature_names_exclude_outcome(self, separable_split):
        result = train_booster(separable_split, config=FAST_BOOSTER)
        assert result.feature_names == ["SEX", "Ala", "Phe", "Tyr", "ASA"]
        assert next(iter(result.feature_importances)) == "Phe"

    def test_separable_data_scores_well(self, separable_split):
        result = train_booster(separable_split, config=FAST_BOOSTER)
        evaluation, y_test, y_prob = evaluate_booster(result, separable_split.test)
        assert len(y_test) == separable_split.test.height
        assert np.all((y_prob >= 0.0) & (y_prob <= 1.0))
        assert evaluation.accuracy >= 0.9
        assert evaluation.pr_auc >= 0.9

    def test_deterministic(self, separable_split):
        a = train_booster(separable_split, config=FAST_BOOSTER)
        b = train_booster(separable_split, config=FAST_BOOSTER)
        assert a.history == b.history


class TestRunExperiment:
    """Tests for run_experiment()."""

    def test_writes_artefacts(self, separable_table, write_csv, tmp_path, capsys):
        path = write_csv(separable_table)
        config = PipelineConfig.from_csv(path, output_dir=tmp_path / "out", booster=FAST_BOOSTER)
        result = run_experiment(config)

        out = capsys.readouterr().out
        assert "Accuracy:" in out
        assert result.accuracy >= 0.9
        assert sum(result.sizes.values()) == 200

        out_dir = tmp_path / "out"
        for name in ("metrics.json", "loss_curve.png", "precision_recall.png", "feature_importances.csv"):
            assert (out_dir / name).exists()
        payload = json.loads((out_dir / "metrics.json").read_text())
        assert payload["sizes"] == result.sizes
        assert payload["metrics"]["accuracy"] == pytest.approx(result.accuracy)

    def test_summary_prints_metrics(self, separable_table, write_csv, tmp_path, capsys):
        config = PipelineConfig.from_csv(
            write_csv(separable_table), output_dir=tmp_path / "out", booster=FAST_BOOSTER
        )
        result = run_experiment(config)
        capsys.readouterr()
        result.summary()
        out = capsys.readouterr().out
        assert "PR-AUC" in out
        assert "Confusion Matrix" in out


class TestPipelineConfig:
    """Tests for PipelineConfig."""

    def test_default_output_dir(self, tmp_path):
        config = PipelineConfig.from_csv(tmp_path / "screen.csv")
        assert config.output_dir == tmp_path / "screen_ml_pipeline"
        assert config.split.seed == 42
