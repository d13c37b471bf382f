"""Command line entry point for training a multilayer perceptron."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from mlpnet.core.activations import Activation
from mlpnet.core.init import InitMethod
from mlpnet.core.types import ConfigurationError
from mlpnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "mistakes": result.mistakes,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if result.summary_path:
        payload["summary"] = result.summary_path
    if result.losses_path:
        payload["losses"] = result.losses_path
    if result.weights_path:
        payload["weights"] = result.weights_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="blobs-relu-fixed",
        help="Preset configuration to start from",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("-t", "--train-path", help="Path of the training dataset (CSV)")
    parser.add_argument("-v", "--validation-path", help="Path of the validation dataset (CSV)")
    parser.add_argument(
        "-n",
        "--network-structure",
        type=int,
        nargs="+",
        metavar="WIDTH",
        help="Layer widths, e.g. 784 500 300 10",
    )
    parser.add_argument("-l", "--learning-rate", type=float, help="Learning rate (default 0.01)")
    parser.add_argument("-b", "--batch-size", type=int, help="Batch size (default 50)")
    parser.add_argument(
        "-e",
        "--num-epochs",
        type=int,
        help="Number of epochs; when omitted with --train-path, early stopping is used",
    )
    parser.add_argument("--epsilon", type=float, help="Tolerance for early stopping (default 0.0001)")
    parser.add_argument("--max-epochs", type=int, help="Upper bound on early-stopping epochs")
    parser.add_argument(
        "-a",
        "--activation-function",
        type=Activation.parse,
        help="One of: " + ", ".join(member.value for member in Activation),
    )
    parser.add_argument(
        "-i",
        "--initialization",
        type=InitMethod.parse,
        help="One of: " + ", ".join(member.value for member in InitMethod),
    )
    parser.add_argument("-d", "--debug-path", help="Write '<epoch>    <loss>' lines here")
    parser.add_argument("-w", "--weight-path", help="Export trained weights as JSON here")
    parser.add_argument("--seed", type=int, help="Seed for weight initialisation")
    parser.add_argument("--run-dir", help="Directory for metrics and manifest")
    parser.add_argument("--enable-plots", action="store_true", help="Render loss.png")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument("--dump-config", type=Path, help="Dump the resolved config to a JSON file")
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        config = _merge(config, _load_override(args.config))

    data_cfg = config.setdefault("data", {})
    model_cfg = config.setdefault("model", {})
    train_cfg = config.setdefault("train", {})

    if args.train_path:
        options = {"train_path": args.train_path}
        if args.validation_path:
            options["validation_path"] = args.validation_path
        config["data"] = {"name": "csv", "options": options}
        # No explicit epoch count means early stopping.
        if args.num_epochs is None:
            train_cfg["epochs"] = None
    elif args.validation_path:
        if data_cfg.get("name") != "csv":
            raise ConfigurationError(
                "--validation-path needs --train-path or a csv dataset, "
                f"not {data_cfg.get('name')!r}"
            )
        data_cfg.setdefault("options", {})["validation_path"] = args.validation_path

    if args.network_structure:
        model_cfg["layers"] = list(args.network_structure)
    if args.activation_function is not None:
        model_cfg["activation"] = args.activation_function.value
    if args.initialization is not None:
        model_cfg["init"] = args.initialization.value

    overrides = {
        "lr": args.learning_rate,
        "batch_size": args.batch_size,
        "epochs": args.num_epochs,
        "epsilon": args.epsilon,
        "max_epochs": args.max_epochs,
        "debug_path": args.debug_path,
        "weight_path": args.weight_path,
        "seed": args.seed,
        "run_dir": args.run_dir,
    }
    train_cfg.update({key: value for key, value in overrides.items() if value is not None})
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if result.mistakes is not None:
        print(f"The number of mistakes is {result.mistakes}")
    print(_format_result(result))


if __name__ == "__main__":
    main()
