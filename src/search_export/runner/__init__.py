"""
Export runner components.
"""

from .export_runner import ScrollExportRunner, DEFAULT_RELEASE_TIMEOUT
from .progress import (
    ProgressReporter,
    NullProgress,
    LoggingProgress,
    QueuedProgress,
    PLACEHOLDER_TOTAL,
)

__all__ = [
    "ScrollExportRunner",
    "DEFAULT_RELEASE_TIMEOUT",
    "ProgressReporter",
    "NullProgress",
    "LoggingProgress",
    "QueuedProgress",
    "PLACEHOLDER_TOTAL",
]
