"""
Sink interface for writing exported batches.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from .models import Batch


class BatchSink(ABC):
    """
    Abstract base class for batch sinks.

    A sink owns one open file handle for the whole export. Batches are
    appended as they arrive and flushed, so partial output stays readable
    if the run later fails.
    """

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        self.documents_written = 0
        self._file = None

    def open(self) -> "BatchSink":
        """Open the output file, creating its directory if needed."""
        if self._file is None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.file_path, "w", encoding="utf-8", newline="")
            self._on_open()
        return self

    def _on_open(self) -> None:
        """Hook for subclasses that wrap the file handle."""
        pass

    def write_batch(self, batch: Batch) -> int:
        """
        Append a batch to the output file.

        Args:
            batch: Documents to write

        Returns:
            Number of documents written
        """
        if self._file is None:
            raise RuntimeError(f"{self.get_name()} sink is not open")
        written = self._write_documents(batch)
        self._file.flush()
        self.documents_written += written
        return written

    @abstractmethod
    def _write_documents(self, batch: Batch) -> int:
        """Encode and write documents; return how many were written."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the sink name/identifier."""
        pass

    def close(self) -> None:
        """Close the output file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
