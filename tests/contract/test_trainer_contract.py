import json
from pathlib import Path

import pytest

from mlpnet.core.types import ConfigurationError
from mlpnet.reporting import read_losses, read_weights
from mlpnet.training import pipelines


def _blobs_config(run_dir: Path, **train_overrides) -> dict:
    train = {
        "epochs": 4,
        "batch_size": 8,
        "seed": 11,
        "lr": 0.01,
        "run_dir": str(run_dir),
        "enable_plots": False,
    }
    train.update(train_overrides)
    return {
        "data": {
            "name": "blobs",
            "options": {"n_samples": 48, "n_validation": 16, "n_features": 3, "n_classes": 2},
        },
        "model": {"layers": [3, 5, 2], "activation": "sigmoid", "init": "xavier"},
        "train": train,
    }


def test_trainer_pipeline_produces_artifacts(tmp_path):
    debug = tmp_path / "debug" / "losses.txt"
    weights = tmp_path / "weights.json"
    config = _blobs_config(tmp_path / "run", debug_path=str(debug), weight_path=str(weights))

    result = pipelines.run_pipeline(config)

    assert result.epochs == 4
    assert 0 <= result.mistakes <= 16
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["dataset"]["name"] == "blobs"

    metrics = [
        json.loads(line)
        for line in Path(result.metrics_path).read_text().splitlines()
        if line
    ]
    assert [record["epoch"] for record in metrics] == [0, 1, 2, 3]
    assert {"train_loss", "val_loss", "val_mistakes", "val_accuracy"} <= set(metrics[0])
    assert (tmp_path / "run" / "metrics.csv").exists()
    assert (tmp_path / "run" / "config.json").exists()
    assert Path(result.summary_path).exists()
    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["epochs"] == 4
    assert summary["stopped_early_at"] is None
    assert 0 <= summary["validation"]["best"]["epoch"] <= 3

    losses = read_losses(result.losses_path)
    assert [epoch for epoch, _ in losses] == [0, 1, 2, 3]
    assert losses[-1][1] == pytest.approx(metrics[-1]["val_loss"])
    assert sorted(read_weights(result.weights_path)) == ["W0", "W1", "b0", "b1"]


def test_pipeline_is_deterministic(tmp_path):
    first = pipelines.run_pipeline(_blobs_config(tmp_path / "a"))
    second = pipelines.run_pipeline(_blobs_config(tmp_path / "b"))
    assert Path(first.metrics_path).read_text() == Path(second.metrics_path).read_text()
    assert Path(first.summary_path).read_text() == Path(second.summary_path).read_text()
    assert first.mistakes == second.mistakes


def test_pipeline_early_stopping_runs_at_least_two_epochs(tmp_path):
    config = _blobs_config(tmp_path / "run", epochs=None, epsilon=10.0)
    result = pipelines.run_pipeline(config)
    assert result.epochs == 2
    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["stopped_early_at"] == 1
    assert summary["validation"]["last_mistakes"] == result.mistakes


def test_pipeline_rejects_missing_sections(tmp_path):
    with pytest.raises(ConfigurationError, match="train"):
        pipelines.run_pipeline({"data": {"name": "blobs"}, "model": {"layers": [4, 3]}})


def test_pipeline_rejects_width_mismatch(tmp_path):
    config = _blobs_config(tmp_path / "run")
    config["model"]["layers"] = [4, 5, 2]
    with pytest.raises(ConfigurationError, match="features"):
        pipelines.run_pipeline(config)


def test_presets_include_builtin_and_file_presets():
    names = set(pipelines.presets())
    assert {"blobs-relu-fixed", "blobs-tanh-early-stop", "four-corners-or", "mnist-csv"} <= names
    mnist = pipelines.load_preset("mnist-csv")
    assert mnist["model"]["layers"] == [784, 500, 300, 10]
    assert mnist["train"]["epochs"] is None
    with pytest.raises(ConfigurationError):
        pipelines.load_preset("does-not-exist")


def test_build_termination_selects_mode():
    fixed = pipelines.build_termination({"epochs": 7})
    early = pipelines.build_termination({"epochs": None, "max_epochs": 9})
    assert fixed.count == 7
    assert early.epsilon == pytest.approx(1e-4)
    assert early.max_epochs == 9
