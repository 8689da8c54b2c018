"""
Cursor-driven export loop.

Opens a scroll cursor, writes every batch to a sink until the server
returns an empty page, and releases the cursor. Only one batch is held
in memory at a time.
"""

import logging
import time
from pathlib import Path
from typing import Any, List, Optional

from ..core.connector import SearchConnector, describe_failure, raise_for_response
from ..core.errors import SearchExportError
from ..core.models import ConnectionSpec, Cursor, ExportResult, ExportSpec, ExportState
from ..query.normalizer import normalize_query
from ..storage import build_export_path, create_sink
from .progress import NullProgress, PLACEHOLDER_TOTAL, ProgressReporter


logger = logging.getLogger(__name__)

DEFAULT_RELEASE_TIMEOUT = 5.0

_TRANSITIONS = {
    ExportState.IDLE: {ExportState.OPENING},
    ExportState.OPENING: {ExportState.FETCHING, ExportState.FAILED},
    ExportState.FETCHING: {ExportState.DRAINING, ExportState.FAILED},
    ExportState.DRAINING: {ExportState.RELEASED},
    ExportState.RELEASED: set(),
    ExportState.FAILED: set(),
}


class ScrollExportRunner:
    """
    Runs one export from an index to a local file.

    Manages the workflow:
    1. Normalize the query and open a scroll cursor (OPENING)
    2. Write each non-empty batch and fetch the next one with the most
       recently returned cursor id (FETCHING)
    3. Stop on an empty batch (DRAINING)
    4. Release the cursor once (RELEASED)

    Any non-success response while opening or fetching moves the run to
    FAILED. Batches already written stay on disk and are reported as a
    partial result. Cursor release is best-effort and never retried.
    """

    def __init__(
        self,
        connector: SearchConnector,
        connection: ConnectionSpec,
        export: ExportSpec,
        progress: Optional[ProgressReporter] = None,
        request_timeout: Optional[float] = None,
        release_timeout: float = DEFAULT_RELEASE_TIMEOUT,
    ):
        """
        Initialize the export runner.

        Args:
            connector: Connector for the search service
            connection: Target endpoint and index
            export: Format, fields, batch size and cursor lifetime
            progress: Optional progress reporter
            request_timeout: Timeout for open and fetch calls (connector default when None)
            release_timeout: Timeout for the release call after a failure or interrupt
        """
        self.connector = connector
        self.connection = connection
        self.export = export
        self.progress = progress or NullProgress()
        self.request_timeout = request_timeout
        self.release_timeout = release_timeout

        self.state = ExportState.IDLE
        self.state_history: List[ExportState] = [ExportState.IDLE]
        self.cursor: Optional[Cursor] = None

    def _transition(self, new_state: ExportState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid export state transition: {self.state.value} -> {new_state.value}")
        logger.debug(f"Export state: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.state_history.append(new_state)

    def run(self, query: Any, file_path: Optional[Path] = None) -> ExportResult:
        """
        Export every document matching query.

        Args:
            query: Complete request, bare clause, or JSON text
            file_path: Output file; derived from index and time when None

        Returns:
            ExportResult; success is False when the run failed, in which
            case counts describe the partial output

        Raises:
            KeyboardInterrupt: re-raised after a best-effort cursor release
        """
        if self.state != ExportState.IDLE:
            raise RuntimeError("An export runner can only be used once")

        index = self.connection.index
        lifetime = self.export.scroll_timeout
        file_path = Path(file_path) if file_path else build_export_path(
            self.export.output_dir, index, self.export.format
        )

        logger.info(f"Starting export: index={index}, format={self.export.format.value}, file={file_path}")
        if not file_path.parent.exists():
            logger.info(f"Creating output directory: {file_path.parent}")

        start_time = time.monotonic()
        total_exported = 0
        batches = 0
        error_message = None

        self._transition(ExportState.OPENING)
        normalized = normalize_query(query, self.export)
        logger.debug(f"Request body built via {normalized.path.value} path")

        sink = create_sink(self.export.format, file_path, fields=self.export.fields)
        try:
            with sink:
                response = self.connector.search(
                    index, normalized.body, scroll=lifetime, timeout=self.request_timeout
                )
                raise_for_response(response, "Initial search")

                if response.scroll_id:
                    self.cursor = Cursor(scroll_id=response.scroll_id, lifetime=lifetime)
                self.progress.start(response.total if response.total > 0 else PLACEHOLDER_TOTAL)
                self._transition(ExportState.FETCHING)

                batch = response.hits
                while batch:
                    sink.write_batch(batch)
                    total_exported += len(batch)
                    batches += 1
                    self.progress.advance(len(batch))
                    logger.debug(f"Batch {batches}: {len(batch)} documents (total {total_exported})")

                    if self.cursor is None:
                        logger.warning("Server returned no scroll id; stopping after the first page")
                        break

                    response = self.connector.scroll(
                        self.cursor.scroll_id, lifetime, timeout=self.request_timeout
                    )
                    raise_for_response(response, "Scroll continuation", during_scroll=True)

                    if response.scroll_id:
                        self.cursor.scroll_id = response.scroll_id
                    batch = response.hits

                self._transition(ExportState.DRAINING)

        except (SearchExportError, OSError) as e:
            if self.state in (ExportState.OPENING, ExportState.FETCHING):
                self._transition(ExportState.FAILED)
            error_message = str(e)
            logger.error(f"Export failed after {total_exported} documents: {error_message}")
        except BaseException as e:
            if self.state in (ExportState.OPENING, ExportState.FETCHING):
                self._transition(ExportState.FAILED)
            logger.warning(f"Export aborted after {total_exported} documents ({type(e).__name__})")
            raise
        finally:
            if self.cursor is not None and not self.cursor.released:
                timeout = self.request_timeout if self.state == ExportState.DRAINING else self.release_timeout
                self._release(self.cursor, timeout)

        elapsed = time.monotonic() - start_time
        file_size = file_path.stat().st_size if file_path.exists() else 0

        if error_message is None:
            self._transition(ExportState.RELEASED)
            self.progress.finish()
            logger.info(f"Export complete: {total_exported} documents in {elapsed:.1f}s -> {file_path}")
        elif total_exported:
            logger.info(f"Partial output kept at {file_path}")

        return ExportResult(
            file_path=file_path,
            total_documents=total_exported,
            elapsed_seconds=elapsed,
            file_size_bytes=file_size,
            success=error_message is None,
            error_message=error_message,
            final_state=self.state,
            batches=batches,
        )

    def _release(self, cursor: Cursor, timeout: Optional[float]) -> None:
        """Release the cursor once; failures are logged, never raised."""
        cursor.released = True
        try:
            response = self.connector.clear_scroll(cursor.scroll_id, timeout=timeout)
        except Exception as e:
            logger.warning(f"Cursor release raised: {e}")
            return
        if response.ok:
            logger.debug("Cursor released")
        else:
            logger.warning(describe_failure(response, "Cursor release"))
