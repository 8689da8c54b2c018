"""
CSV batch sink.
"""

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..core.models import Batch
from ..core.sink import BatchSink
from .values import render_cell


logger = logging.getLogger(__name__)


def collect_header(batch: Batch) -> List[str]:
    """
    Union of field names across all documents, in first-seen order.

    Every document is scanned so columns absent from the first record
    are not dropped.
    """
    header: List[str] = []
    seen = set()
    for document in batch:
        for key in document:
            if key not in seen:
                seen.add(key)
                header.append(key)
    return header


class CsvSink(BatchSink):
    """
    Writes documents as CSV rows.

    The header is the explicit field list when one is configured, else
    the union of keys in the first batch. It is written exactly once.
    Fields outside the header in later batches are not written; missing
    fields become empty cells. Cells are quoted per the excel dialect
    whenever they contain a comma, quote, or line break.
    """

    def __init__(self, file_path: Path, fields: Optional[Sequence[str]] = None):
        super().__init__(file_path)
        self.header: Optional[List[str]] = list(fields) if fields else None
        self._writer = None
        self._header_written = False

    def _on_open(self) -> None:
        self._writer = csv.writer(self._file)
        if self.header:
            self._write_header()

    def _write_header(self) -> None:
        self._writer.writerow(self.header)
        self._header_written = True
        logger.debug(f"CSV header: {self.header}")

    def _write_documents(self, batch: Batch) -> int:
        if not self._header_written:
            if self.header is None:
                self.header = collect_header(batch)
            self._write_header()

        self._writer.writerows(self._rows(batch))
        return len(batch)

    def _rows(self, batch: Batch) -> Iterable[List[str]]:
        for document in batch:
            yield [render_cell(document.get(column)) for column in self.header]

    def get_name(self) -> str:
        return "csv"
