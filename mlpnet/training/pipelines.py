"""Pipeline assembly: config → dataset → network → trainer → artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping, Sequence

from ..core.network import MultilayerPerceptron
from ..core.types import ConfigurationError, RunResult
from ..data import registry
from ..reporting.artifacts import write_losses, write_manifest, write_weights
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import evaluate
from .trainer import EarlyStopping, FixedEpochs, SGDOptimizer, Termination, Trainer, TrainingConfig

DEFAULT_EPSILON = 1e-4

_PRESETS: Dict[str, Mapping[str, object]] = {
    "blobs-relu-fixed": {
        "data": {
            "name": "blobs",
            "options": {"n_samples": 256, "n_validation": 64, "n_features": 4, "n_classes": 3},
        },
        "model": {"layers": [4, 16, 3], "activation": "relu", "init": "default"},
        "train": {
            "epochs": 20,
            "batch_size": 16,
            "lr": 0.01,
            "seed": 7,
            "run_dir": "runs/blobs-relu-fixed",
            "enable_plots": False,
        },
    },
    "blobs-tanh-early-stop": {
        "data": {
            "name": "blobs",
            "options": {"n_samples": 256, "n_validation": 64, "n_features": 4, "n_classes": 3},
        },
        "model": {"layers": [4, 16, 8, 3], "activation": "tanh", "init": "xavier"},
        "train": {
            "epochs": None,
            "epsilon": 1e-4,
            "max_epochs": 500,
            "batch_size": 32,
            "lr": 0.01,
            "seed": 11,
            "run_dir": "runs/blobs-tanh-early-stop",
            "enable_plots": False,
        },
    },
    "four-corners-or": {
        "data": {"name": "four_corners", "options": {"labelling": "or"}},
        "model": {"layers": [2, 4, 2], "activation": "relu", "init": "default"},
        "train": {
            "epochs": 500,
            "batch_size": 4,
            "lr": 0.1,
            "seed": 0,
            "run_dir": "runs/four-corners-or",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None

_REQUIRED_SECTIONS = {"data", "model", "train"}


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = _REQUIRED_SECTIONS - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise ConfigurationError(
                        f"Preset {file.name} is missing required sections: {missing_str}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    try:
        return available[name]
    except KeyError as exc:
        raise ConfigurationError(f"Unknown preset: {name}") from exc


def build_termination(train_cfg: Mapping[str, object]) -> Termination:
    """``epochs: None`` selects early stopping, an integer a fixed count."""

    epochs = train_cfg.get("epochs")
    if epochs is None:
        max_epochs = train_cfg.get("max_epochs")
        return EarlyStopping(
            epsilon=float(train_cfg.get("epsilon", DEFAULT_EPSILON)),
            max_epochs=int(max_epochs) if max_epochs is not None else None,
        )
    return FixedEpochs(count=int(epochs))


def build_model(model_cfg: Mapping[str, object], seed: int | None) -> MultilayerPerceptron:
    if "layers" not in model_cfg:
        raise ConfigurationError("model config must define `layers`")
    return MultilayerPerceptron(
        layer_dims=list(model_cfg["layers"]),  # type: ignore[arg-type]
        activation=str(model_cfg.get("activation", "relu")),
        init=str(model_cfg.get("init", "default")),
        seed=seed,
    )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise ConfigurationError(f"Config is missing sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    # Build everything that can fail on configuration before touching data.
    model = build_model(model_cfg, seed)
    termination = build_termination(train_cfg)
    training_config = TrainingConfig(
        batch_size=int(train_cfg.get("batch_size", 50)), termination=termination
    )
    optimizer = SGDOptimizer(lr=float(train_cfg.get("lr", 0.01)))

    options = dict(data_cfg.get("options", {}))
    if data_cfg.get("name") == "csv":
        options.setdefault("num_features", model.layer_dims[0])
        options.setdefault("num_classes", model.layer_dims[-1])
    dataset = registry.get_dataset(str(data_cfg.get("name")), **options)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        dims=model.layer_dims,
        activation=model.activation.value,
        init=model.init.value,
        termination=termination,
        param_count=model.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(model, optimizer, training_config, callbacks=[jsonl, csv_sink, plots])

    losses = trainer.fit(dataset.train, dataset.validation)
    plots.close()

    mistakes = None
    if dataset.validation is not None:
        mistakes = evaluate(model, dataset.validation).mistakes

    losses_path = ""
    if train_cfg.get("debug_path"):
        losses_path = write_losses(train_cfg["debug_path"], losses)  # type: ignore[arg-type]
    weights_path = ""
    if train_cfg.get("weight_path"):
        weights_path = write_weights(train_cfg["weight_path"], model.state_dict())  # type: ignore[arg-type]

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", stopped_early_at=trainer.stopped_early_at
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=len(trainer.history),
        mistakes=mistakes,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        losses_path=losses_path,
        weights_path=weights_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _describe_termination(termination: Termination) -> str:
    if isinstance(termination, FixedEpochs):
        return f"fixed, {termination.count} epochs"
    cap = "unbounded" if termination.max_epochs is None else f"max {termination.max_epochs}"
    return f"early stopping, epsilon={termination.epsilon:g} ({cap})"


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Sequence[int],
    activation: str,
    init: str,
    termination: Termination,
    param_count: int,
) -> None:
    print("=== mlpnet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Dimensions    : {list(dims)}")
    print(f"Activation    : {activation}")
    print(f"Init          : {init}")
    print(f"Termination   : {_describe_termination(termination)}")
    print(f"Parameters    : {param_count}")
    print("==================")


__all__ = [
    "build_model",
    "build_termination",
    "load_preset",
    "presets",
    "run_pipeline",
]
