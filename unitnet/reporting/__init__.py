"""Reporting utilities for unitnet."""

from .artifacts import write_json, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["CsvSink", "JsonlSink", "PlotAdapter", "write_json", "write_manifest", "write_summary"]
