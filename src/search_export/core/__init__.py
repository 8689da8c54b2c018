"""
Core abstractions and models for the search export engine.
"""

from .errors import (
    SearchExportError,
    ConfigError,
    TransportError,
    ServerRejectionError,
    CursorLifecycleError,
)
from .models import (
    ConnectionSpec, ExportSpec, ExportFormat, ExportState,
    Cursor, ExportResult, Document, Batch,
)
from .connector import SearchConnector, SearchResponse, describe_failure, raise_for_response
from .sink import BatchSink

__all__ = [
    "SearchExportError",
    "ConfigError",
    "TransportError",
    "ServerRejectionError",
    "CursorLifecycleError",
    "ConnectionSpec",
    "ExportSpec",
    "ExportFormat",
    "ExportState",
    "Cursor",
    "ExportResult",
    "Document",
    "Batch",
    "SearchConnector",
    "SearchResponse",
    "describe_failure",
    "raise_for_response",
    "BatchSink",
]
