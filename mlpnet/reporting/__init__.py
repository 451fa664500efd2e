"""Reporting utilities for mlpnet."""

from .artifacts import write_manifest
from .metrics import ConsoleSink, CsvSink, JsonlSink
from .plots import PlotAdapter

__all__ = ["write_manifest", "ConsoleSink", "CsvSink", "JsonlSink", "PlotAdapter"]
