"""Per-epoch metric sinks."""

from __future__ import annotations

import csv
import json
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Mapping, TextIO


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def _numeric(metrics: Mapping[str, object]) -> Dict[str, float]:
    return {k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))}


class ConsoleSink:
    """Print ``Epoch N: correct / total`` after every epoch."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        line = f"Epoch {epoch}"
        if "correct" in metrics and "total" in metrics:
            line += f": {int(metrics['correct'])} / {int(metrics['total'])}"
        print(line, file=self.stream or sys.stdout)

    __call__ = on_epoch


class _FileSink:
    """Truncate ``path`` on creation and tag each record with its split."""

    def __init__(self, path: str | Path, split: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def _record(self, epoch: int) -> Dict[str, object]:
        return {"epoch": int(epoch), "split": self.split}


class JsonlSink(_FileSink):
    """One JSON object per epoch, stamped with the run seed and git sha."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "val",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split)
        self.seed = seed
        self.sha = sha or _git_sha()

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = self._record(epoch)
        record.update({"seed": self.seed, "sha": self.sha})
        record.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink(_FileSink):
    """CSV table whose columns are fixed by the first epoch written.

    Later metrics missing from the header are dropped; absent ones are left
    blank.
    """

    def __init__(self, path: str | Path, *, split: str = "val") -> None:
        super().__init__(path, split)
        self._fields: List[str] | None = None

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row = self._record(epoch)
        row.update(_numeric(metrics))
        if self._fields is None:
            self._fields = ["epoch", "split"] + sorted(set(row) - {"epoch", "split"})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self._fields, extrasaction="ignore")
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = on_epoch


__all__ = ["ConsoleSink", "JsonlSink", "CsvSink"]
