"""
Storage sinks for exported batches.
"""

from pathlib import Path
from typing import Optional, Sequence

from ..core.models import ExportFormat
from ..core.sink import BatchSink
from .csv_sink import CsvSink, collect_header
from .jsonl_sink import JsonLinesSink
from .naming import build_export_path, sanitize_filename
from .values import render_cell, format_timestamp


def create_sink(
    export_format: ExportFormat,
    file_path: Path,
    fields: Optional[Sequence[str]] = None,
) -> BatchSink:
    """Build the sink for an export format."""
    if ExportFormat(export_format) == ExportFormat.CSV:
        return CsvSink(file_path, fields=fields)
    return JsonLinesSink(file_path)


__all__ = [
    "create_sink",
    "CsvSink",
    "JsonLinesSink",
    "collect_header",
    "build_export_path",
    "sanitize_filename",
    "render_cell",
    "format_timestamp",
]
