"""
Progress reporting for export runs.

The export loop only ever sends fire-and-forget counter updates; a
reporter must not block it.
"""

import logging
import queue
import threading
from abc import ABC, abstractmethod
from typing import Optional


logger = logging.getLogger(__name__)

# Ceiling used when the server does not report a total-count estimate
PLACEHOLDER_TOTAL = 1_000_000


class ProgressReporter(ABC):
    """Receives progress updates from the export loop."""

    @abstractmethod
    def start(self, total: int) -> None:
        """Set the progress ceiling."""
        pass

    @abstractmethod
    def advance(self, count: int) -> None:
        """Add count exported documents."""
        pass

    def finish(self) -> None:
        """Mark the run complete."""
        pass


class NullProgress(ProgressReporter):
    """Discards all updates."""

    def start(self, total: int) -> None:
        pass

    def advance(self, count: int) -> None:
        pass


class LoggingProgress(ProgressReporter):
    """Logs progress every log_every documents."""

    def __init__(self, log_every: int = 50_000, label: str = "export"):
        if log_every <= 0:
            raise ValueError(f"log_every must be positive, got {log_every}")
        self.log_every = log_every
        self.label = label
        self.total = 0
        self.completed = 0
        self._next_log = log_every

    def start(self, total: int) -> None:
        self.total = total
        self.completed = 0
        self._next_log = self.log_every
        logger.info(f"{self.label}: expecting up to {total:,} documents")

    def advance(self, count: int) -> None:
        self.completed += count
        if self.completed >= self._next_log:
            percent = (self.completed / self.total * 100) if self.total else 0.0
            logger.info(f"{self.label}: {self.completed:,} documents ({percent:.1f}%)")
            while self._next_log <= self.completed:
                self._next_log += self.log_every

    def finish(self) -> None:
        logger.info(f"{self.label}: finished with {self.completed:,} documents")


class QueuedProgress(ProgressReporter):
    """
    Forwards updates to another reporter from a background thread.

    Updates go into an unbounded queue, so a slow reporter delays only
    its own display, never the export.
    """

    _STOP = object()

    def __init__(self, reporter: ProgressReporter):
        self.reporter = reporter
        self._queue: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    def _ensure_thread(self) -> None:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._drain, name="export-progress", daemon=True
            )
            self._thread.start()

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            if item is self._STOP:
                return
            method, value = item
            try:
                if value is None:
                    getattr(self.reporter, method)()
                else:
                    getattr(self.reporter, method)(value)
            except Exception as e:
                logger.warning(f"Progress reporter failed on {method}: {e}")

    def start(self, total: int) -> None:
        self._ensure_thread()
        self._queue.put_nowait(("start", total))

    def advance(self, count: int) -> None:
        self._ensure_thread()
        self._queue.put_nowait(("advance", count))

    def finish(self) -> None:
        self._ensure_thread()
        self._queue.put_nowait(("finish", None))

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop the forwarding thread once queued updates are delivered."""
        if self._thread is not None:
            self._queue.put_nowait(self._STOP)
            self._thread.join(timeout)
            self._thread = None
