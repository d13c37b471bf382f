"""Reporting utilities for mlpnet."""

from .artifacts import read_losses, read_weights, write_losses, write_manifest, write_weights
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "read_losses",
    "read_weights",
    "write_losses",
    "write_manifest",
    "write_weights",
]
