"""
Core data models for the search export engine.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import ConfigError


# Dynamically-typed document values as decoded from the search service.
DocumentValue = Union[str, int, float, bool, None, datetime, List[Any], Dict[str, Any]]
Document = Dict[str, DocumentValue]
Batch = List[Document]

DEFAULT_BATCH_SIZE = 5000
DEFAULT_SCROLL_TIMEOUT = "2m"
DEFAULT_OUTPUT_DIR = "./exports/"

_DURATION_PATTERN = re.compile(r"^\d+(d|h|m|s|ms|micros|nanos)$")


class ExportFormat(str, Enum):
    """Output encoding of an export file."""
    CSV = "csv"
    JSON = "json"


class ExportState(str, Enum):
    """
    States of the cursor export loop.

    IDLE -> OPENING -> FETCHING -> DRAINING -> RELEASED, with FAILED
    reachable from OPENING or FETCHING.
    """
    IDLE = "idle"
    OPENING = "opening"
    FETCHING = "fetching"
    DRAINING = "draining"
    RELEASED = "released"
    FAILED = "failed"


def is_valid_duration(value: str) -> bool:
    """Return True if value is a time unit string the service accepts (e.g. '2m')."""
    return isinstance(value, str) and bool(_DURATION_PATTERN.match(value))


@dataclass(frozen=True)
class ConnectionSpec:
    """
    Connection settings for one export run.

    The password is never part of the spec; it is supplied separately at
    runtime so it cannot be persisted with the rest of the settings.

    Attributes:
        endpoint: Base URL of the search service
        index: Target index or index pattern
        username: Basic auth user (empty for anonymous access)
        ignore_tls_errors: Skip TLS certificate verification
    """
    endpoint: str
    index: str
    username: str = ""
    ignore_tls_errors: bool = False

    def __post_init__(self):
        if not self.endpoint:
            raise ConfigError("Connection endpoint is required")


@dataclass(frozen=True)
class ExportSpec:
    """
    Export settings for one run.

    Attributes:
        format: Output encoding (csv or json)
        fields: Explicit field list; empty means all fields
        batch_size: Documents requested per fetch
        scroll_timeout: Server-side cursor lifetime, e.g. "2m"
        output_dir: Directory the export file is written to
    """
    format: ExportFormat = ExportFormat.CSV
    fields: Tuple[str, ...] = ()
    batch_size: int = DEFAULT_BATCH_SIZE
    scroll_timeout: str = DEFAULT_SCROLL_TIMEOUT
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)

    def __post_init__(self):
        try:
            fmt = ExportFormat(str(getattr(self.format, "value", self.format)).lower())
        except ValueError:
            raise ConfigError(f"Unsupported export format: {self.format}")
        object.__setattr__(self, "format", fmt)
        fields = self.fields or ()
        if isinstance(fields, str):
            fields = [f.strip() for f in fields.split(",") if f.strip()]
        object.__setattr__(self, "fields", tuple(fields))
        object.__setattr__(self, "output_dir", Path(self.output_dir))

        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ConfigError(f"Batch size must be a positive integer, got {self.batch_size!r}")
        if not is_valid_duration(self.scroll_timeout):
            raise ConfigError(f"Invalid scroll timeout duration: {self.scroll_timeout!r}")


@dataclass
class Cursor:
    """
    Server-issued scroll cursor.

    The id may change on every continuation call; holders must always
    replace it with the most recently returned value.
    """
    scroll_id: str
    lifetime: str
    released: bool = False


@dataclass
class ExportResult:
    """
    Outcome of one export run.

    On failure, total_documents and file_size_bytes describe the partial
    output that remains on disk.
    """
    file_path: Path
    total_documents: int
    elapsed_seconds: float
    file_size_bytes: int
    success: bool = True
    error_message: Optional[str] = None
    final_state: ExportState = ExportState.RELEASED
    batches: int = 0
    finished_at: datetime = field(default_factory=datetime.now)

    @property
    def file_size_mb(self) -> float:
        return self.file_size_bytes / 1024.0 / 1024.0

    def summary(self) -> str:
        """Render a short human-readable summary."""
        minutes, seconds = divmod(int(self.elapsed_seconds), 60)
        lines = [
            f"Export file: {self.file_path}",
            f"Documents:   {self.total_documents:,}",
            f"Elapsed:     {minutes:02d}:{seconds:02d}",
            f"File size:   {self.file_size_mb:.2f} MB",
        ]
        if not self.success:
            lines.insert(0, f"Export failed: {self.error_message}")
            lines.append("Partial output was kept on disk.")
        return "\n".join(lines)
