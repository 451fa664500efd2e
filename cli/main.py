"""Command line entry point for mlpnet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from mlpnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "accuracy": result.accuracy,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="mnist",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--data-dir", help="Directory holding the MNIST IDX files (mnist dataset only)"
    )
    parser.add_argument("--epochs", type=int, help="Override the number of epochs")
    parser.add_argument("--batch-size", type=int, help="Override the mini-batch size")
    parser.add_argument("--lr", type=float, help="Override the learning rate")
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed used for weight initialisation and shuffling",
    )
    parser.add_argument(
        "--keep-last-batch",
        action="store_true",
        help="Train on the trailing partial batch instead of skipping it",
    )
    parser.add_argument("--run-dir", help="Directory for metrics and manifest")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write validation curves"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Do not print per-epoch progress"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = pipelines.merge_config(pipelines.load_preset(args.preset), {})

    if args.config:
        override = pipelines.read_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    train_cfg = config.setdefault("train", {})
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.batch_size is not None:
        train_cfg["batch_size"] = int(args.batch_size)
    if args.lr is not None:
        train_cfg["lr"] = float(args.lr)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.keep_last_batch:
        train_cfg["drop_last"] = False
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.quiet:
        train_cfg["verbose"] = False

    if args.data_dir:
        data_cfg = config.setdefault("data", {})
        data_cfg.setdefault("options", {})["data_dir"] = args.data_dir
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
    print(_format_result(result))


if __name__ == "__main__":
    main()
