"""
JSON-lines batch sink.
"""

from ..core.models import Batch
from ..core.sink import BatchSink
from .values import to_json


class JsonLinesSink(BatchSink):
    """
    Writes one JSON object per line with no enclosing array.

    The file can be appended to and resumed by counting lines.
    """

    def _write_documents(self, batch: Batch) -> int:
        for document in batch:
            self._file.write(to_json(document))
            self._file.write("\n")
        return len(batch)

    def get_name(self) -> str:
        return "jsonl"
