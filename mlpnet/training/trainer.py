"""Mini-batch stochastic gradient descent for :class:`Network`."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

import numpy as np

from ..core.backprop import backward
from ..core.errors import EmptyDataSet, InvalidBatchConfiguration, ShapeMismatch
from ..core.network import Network, as_column
from ..core.types import Array, DataSet, Gradients
from .metrics import summarize


def gradient_descent(
    network: Network,
    batch_inputs: Sequence[Array],
    batch_targets: Sequence[Array],
    learning_rate: float,
) -> None:
    """Apply one averaged gradient step computed over a mini-batch.

    Every per-sample gradient is taken against the parameters as they were
    before the call; the network is updated once, after the whole batch has
    been summed.
    """

    n = len(batch_inputs)
    if n == 0:
        raise EmptyDataSet("mini-batch has no samples")
    if len(batch_targets) != n:
        raise ShapeMismatch(f"mini-batch has {n} inputs but {len(batch_targets)} targets")
    if not learning_rate > 0:
        raise ValueError(f"learning rate must be positive, got {learning_rate}")

    ops = network.ops
    total = backward(network, batch_inputs[0], batch_targets[0])
    dW, dB = list(total.weights), list(total.biases)
    for x, y in zip(batch_inputs[1:], batch_targets[1:]):
        grads = backward(network, x, y)
        dW = [ops.add(acc, g) for acc, g in zip(dW, grads.weights)]
        dB = [ops.add(acc, g) for acc, g in zip(dB, grads.biases)]

    factor = learning_rate / n
    step = Gradients(
        weights=[ops.scale(w, factor) for w in dW],
        biases=[ops.scale(b, factor) for b in dB],
    )
    network.apply_gradients(step)


@dataclass
class SGDOptimizer:
    """Plain SGD: ``θ ← θ − lr · mean(∇C)`` per mini-batch."""

    lr: float

    def __post_init__(self) -> None:
        if not self.lr > 0:
            raise ValueError(f"learning rate must be positive, got {self.lr}")

    def step(self, network: Network, batch: DataSet) -> None:
        gradient_descent(network, batch.inputs, batch.targets, self.lr)


@dataclass
class TrainingHistory:
    """What happened during :meth:`Trainer.run`."""

    epochs: int = 0
    steps: int = 0
    skipped_per_epoch: int = 0
    validation: List[Mapping[str, float]] = field(default_factory=list)

    @property
    def final_accuracy(self) -> float | None:
        if not self.validation:
            return None
        return float(self.validation[-1]["accuracy"])


def _check_samples(network: Network, dataset: DataSet, what: str) -> None:
    for idx, (x, y) in enumerate(dataset):
        as_column(x, network.sizes[0], what=f"{what} input {idx}")
        as_column(y, network.sizes[-1], what=f"{what} target {idx}")


class Trainer:
    """Run the epoch loop and report progress to callbacks.

    Callbacks are objects with an ``on_epoch(epoch, metrics)`` method or plain
    callables taking the same arguments. ``split_loggers`` receive the
    metrics of one split (``"train"`` or ``"val"``); ``callbacks`` receive a
    single merged record at the end of every epoch.
    """

    def __init__(
        self,
        network: Network,
        optimizer: SGDOptimizer,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.optimizer = optimizer
        self.callbacks = list(callbacks or [])

    def run(
        self,
        training: DataSet,
        epochs: int,
        batch_size: int,
        *,
        validation: DataSet | None = None,
        rng: np.random.Generator | None = None,
        drop_last: bool = True,
        split_loggers: Mapping[str, Sequence[object]] | None = None,
    ) -> TrainingHistory:
        return self._run(
            training,
            epochs,
            batch_size,
            validation=validation,
            rng=rng,
            drop_last=drop_last,
            split_loggers=split_loggers,
            stacklevel=3,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _run(
        self,
        training: DataSet,
        epochs: int,
        batch_size: int,
        *,
        validation: DataSet | None,
        rng: np.random.Generator | None,
        drop_last: bool,
        split_loggers: Mapping[str, Sequence[object]] | None,
        stacklevel: int,
    ) -> TrainingHistory:
        # stacklevel points warnings at whoever called run() or train()
        if len(training) == 0:
            raise EmptyDataSet("training set has no samples")
        if batch_size <= 0 or batch_size > len(training):
            raise InvalidBatchConfiguration(
                f"batch size must be in [1, {len(training)}], got {batch_size}"
            )
        if epochs < 0:
            raise ValueError(f"epoch count must not be negative, got {epochs}")
        _check_samples(self.network, training, "training")
        if validation is not None:
            _check_samples(self.network, validation, "validation")

        rng = rng if rng is not None else np.random.default_rng()
        split_loggers = split_loggers or {}
        skipped = len(training) % batch_size if drop_last else 0
        if skipped:
            warnings.warn(
                f"{skipped} trailing training samples are skipped every epoch; "
                f"pass drop_last=False to train on them",
                RuntimeWarning,
                stacklevel=stacklevel,
            )
        history = TrainingHistory(skipped_per_epoch=skipped)

        for epoch in range(1, epochs + 1):
            shuffled = training.shuffled(rng)
            steps = 0
            for batch in shuffled.batches(batch_size, drop_last=drop_last):
                self.optimizer.step(self.network, batch)
                steps += 1
            history.epochs = epoch
            history.steps += steps
            train_metrics = {
                "steps": float(steps),
                "samples": float(len(training) - skipped),
            }
            self._emit(split_loggers.get("train", []), epoch, train_metrics)
            combined = dict(train_metrics)

            if validation is not None and len(validation) > 0:
                metrics = summarize(self.network, validation).as_metrics()
                history.validation.append(metrics)
                self._emit(split_loggers.get("val", []), epoch, metrics)
                combined.update(metrics)

            self._emit(self.callbacks, epoch, combined)

        return history

    @staticmethod
    def _emit(callbacks: Sequence[object], epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


def train(
    network: Network,
    training: DataSet,
    validation: DataSet | None = None,
    *,
    batch_size: int,
    epochs: int,
    learning_rate: float,
    rng: np.random.Generator | None = None,
    drop_last: bool = True,
    callbacks: Sequence[object] | None = None,
) -> TrainingHistory:
    """Train ``network`` in place with mini-batch SGD."""

    trainer = Trainer(network, SGDOptimizer(lr=learning_rate), callbacks=callbacks)
    return trainer._run(
        training,
        epochs,
        batch_size,
        validation=validation,
        rng=rng,
        drop_last=drop_last,
        split_loggers=None,
        stacklevel=3,
    )


__all__ = ["gradient_descent", "SGDOptimizer", "Trainer", "TrainingHistory", "train"]
