"""Preset configurations and end-to-end training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping

import numpy as np

from ..core.errors import ShapeMismatch
from ..core.network import Network
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import ConsoleSink, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .metrics import count_correct
from .trainer import SGDOptimizer, Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "mnist": {
        "data": {
            "name": "mnist",
            "options": {"data_dir": "data", "train_items": 30000, "val_start": 59000},
        },
        "model": {"sizes": [784, 20, 20, 10], "activation": "sigmoid"},
        "train": {
            "epochs": 10,
            "batch_size": 10,
            "lr": 3.0,
            "seed": 0,
            "drop_last": True,
            "run_dir": "runs/mnist",
            "enable_plots": False,
        },
    },
    "mnist-fixture": {
        "data": {"name": "mnist_fixture", "options": {"train_items": 256, "val_items": 32}},
        "model": {"sizes": [784, 20, 20, 10], "activation": "sigmoid"},
        "train": {
            "epochs": 3,
            "batch_size": 10,
            "lr": 3.0,
            "seed": 0,
            "drop_last": True,
            "run_dir": "runs/mnist-fixture",
            "enable_plots": False,
        },
    },
    "blobs": {
        "data": {"name": "blobs", "options": {"n": 240, "classes": 3, "seed": 0}},
        "model": {"hidden": [8], "activation": "sigmoid"},
        "train": {
            "epochs": 20,
            "batch_size": 8,
            "lr": 2.0,
            "seed": 0,
            "drop_last": True,
            "run_dir": "runs/blobs",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"


def read_config_file(path: Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    presets: Dict[str, Mapping[str, object]] = {}
    if _PRESET_DIR.exists():
        for file in sorted(_PRESET_DIR.iterdir()):
            if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                continue
            data = read_config_file(file)
            missing = {"data", "model", "train"} - set(data)
            if missing:
                missing_str = ", ".join(sorted(missing))
                raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
            presets[file.stem] = json.loads(json.dumps(data))
    return presets


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
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    """Recursively merge ``override`` into a copy of ``base``."""

    merged = dict(deepcopy(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def _build_sizes(model_cfg: Mapping[str, object], dataset: registry.DatasetSpec) -> List[int]:
    if "sizes" in model_cfg:
        sizes = [int(width) for width in model_cfg["sizes"]]  # type: ignore[union-attr]
    else:
        hidden = [int(width) for width in model_cfg.get("hidden", [])]  # type: ignore[union-attr]
        sizes = [dataset.d_in, *hidden, dataset.num_classes]
    if sizes and sizes[0] != dataset.d_in:
        raise ShapeMismatch(f"Configured input width {sizes[0]} but dataset has {dataset.d_in}")
    if sizes and sizes[-1] != dataset.num_classes:
        raise ShapeMismatch(
            f"Configured output width {sizes[-1]} but dataset has {dataset.num_classes} classes"
        )
    return sizes


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Build the dataset and network described by ``config``, train, evaluate."""

    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    sizes = _build_sizes(model_cfg, dataset)
    activation = str(model_cfg.get("activation", "sigmoid"))

    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 1))
    batch_size = int(train_cfg.get("batch_size", 10))
    lr = float(train_cfg.get("lr", 3.0))
    drop_last = bool(train_cfg.get("drop_last", True))

    network = Network(sizes, rng=np.random.default_rng(seed), activation=activation)
    shuffle_rng = np.random.default_rng(seed + 1)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        splits=dataset.splits,
        sizes=sizes,
        activation=activation,
        lr=lr,
        batch_size=batch_size,
        param_count=network.parameter_count(),
    )

    val_jsonl = JsonlSink(run_dir / "metrics_val.jsonl", split="val", seed=seed)
    val_csv = CsvSink(run_dir / "metrics_val.csv", split="val")
    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed)
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: list[object] = [plots]
    if bool(train_cfg.get("verbose", True)):
        callbacks.insert(0, ConsoleSink())

    trainer = Trainer(network, SGDOptimizer(lr=lr), callbacks=callbacks)
    history = trainer.run(
        dataset.train,
        epochs,
        batch_size,
        validation=dataset.validation if len(dataset.validation) else None,
        rng=shuffle_rng,
        drop_last=drop_last,
        split_loggers={"train": [train_jsonl], "val": [val_jsonl, val_csv]},
    )
    plots.close()

    final_split = dataset.test if len(dataset.test) else dataset.train
    correct = count_correct(network, final_split)
    accuracy = correct / len(final_split)
    print(f"Accuracy: {correct} / {len(final_split)} ({accuracy * 100:.2f}%)")

    resolved = json.loads(json.dumps(merge_config(config, {"model": {"sizes": sizes}})))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=resolved,
        dataset_provenance=dataset.provenance,
        results={
            "accuracy": accuracy,
            "epochs": history.epochs,
            "steps": history.steps,
            "skipped_per_epoch": history.skipped_per_epoch,
        },
    )
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))

    return RunResult(
        epochs=history.epochs,
        accuracy=float(accuracy),
        metrics_path=str(val_jsonl.path),
        manifest_path=manifest,
    )


def _print_startup_summary(
    *,
    dataset_name: str,
    splits: Mapping[str, int],
    sizes: List[int],
    activation: str,
    lr: float,
    batch_size: int,
    param_count: int,
) -> None:
    print("=== mlpnet run ===")
    print(f"Dataset       : {dataset_name} {dict(splits)}")
    print(f"Layer sizes   : {sizes}")
    print(f"Activation    : {activation}")
    print(f"Learning rate : {lr}")
    print(f"Batch size    : {batch_size}")
    print(f"Parameters    : {param_count}")
    print("==================")


__all__ = ["run_pipeline", "load_preset", "presets", "merge_config", "read_config_file"]
