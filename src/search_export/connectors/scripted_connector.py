"""
Scripted connector for testing.

Replays queued responses without any network access and records every
call, so the export loop and connection validator can be exercised
deterministically.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional

from ..core.connector import SearchConnector, SearchResponse
from ..core.models import Batch

logger = logging.getLogger(__name__)


def page_response(
    documents: Batch,
    scroll_id: Optional[str] = None,
    total: Optional[int] = None,
) -> SearchResponse:
    """Build a successful search/scroll response carrying documents."""
    hits: Dict[str, Any] = {
        "hits": [
            {"_index": "scripted", "_id": str(i), "_source": doc}
            for i, doc in enumerate(documents)
        ],
    }
    if total is not None:
        hits["total"] = {"value": total, "relation": "eq"}
    payload: Dict[str, Any] = {"hits": hits}
    if scroll_id is not None:
        payload["_scroll_id"] = scroll_id
    return SearchResponse(status_code=200, payload=payload)


def error_response(status_code: int, reason: str, error_type: Optional[str] = None) -> SearchResponse:
    """Build a non-2xx response with a structured error body."""
    error = {"reason": reason}
    if error_type:
        error["type"] = error_type
    error["root_cause"] = [dict(error)]
    return SearchResponse(status_code=status_code, payload={"error": error, "status": status_code})


def transport_failure(message: str) -> SearchResponse:
    """Build a response for a request that never reached the server."""
    return SearchResponse(status_code=0, payload={}, error_message=message)


@dataclass
class RecordedCall:
    """One call made against the scripted connector."""
    operation: str
    args: Dict[str, Any] = field(default_factory=dict)


class ScriptedConnector(SearchConnector):
    """
    Deterministic connector that replays scripted responses.

    Each operation has its own queue. When a queue is empty the
    operation's default response is returned (a 200 for release calls, a
    404 for everything else).

    Features:
    - Per-operation response queues
    - Call history for asserting on request order and arguments
    - Optional exception injection (e.g. KeyboardInterrupt on scroll)
    """

    def __init__(
        self,
        search: Optional[Iterable[SearchResponse]] = None,
        scroll: Optional[Iterable[SearchResponse]] = None,
        clear_scroll: Optional[Iterable[SearchResponse]] = None,
        ping: Optional[Iterable[SearchResponse]] = None,
        cluster_health: Optional[Iterable[SearchResponse]] = None,
        root: Optional[Iterable[SearchResponse]] = None,
        raise_on: Optional[Dict[str, BaseException]] = None,
    ):
        self.responses: Dict[str, Deque[SearchResponse]] = {
            "search": deque(search or []),
            "scroll": deque(scroll or []),
            "clear_scroll": deque(clear_scroll or []),
            "ping": deque(ping or []),
            "cluster_health": deque(cluster_health or []),
            "root": deque(root or []),
        }
        self.raise_on = dict(raise_on or {})
        self.calls: List[RecordedCall] = []
        self.closed = False

    @classmethod
    def from_batches(
        cls,
        batches: List[Batch],
        total: Optional[int] = None,
        rotate_ids: bool = True,
    ) -> "ScriptedConnector":
        """
        Script a complete scroll over batches, ending with an empty page.

        With rotate_ids, every response carries a new cursor id
        ("cursor-0", "cursor-1", ...).
        """
        pages = list(batches) + [[]]
        responses = []
        for i, docs in enumerate(pages):
            scroll_id = f"cursor-{i}" if rotate_ids else "cursor-0"
            responses.append(page_response(docs, scroll_id=scroll_id, total=total if i == 0 else None))
        return cls(search=responses[:1], scroll=responses[1:])

    def _next(self, operation: str, **args) -> SearchResponse:
        self.calls.append(RecordedCall(operation=operation, args=args))
        if operation in self.raise_on:
            raise self.raise_on.pop(operation)
        queue = self.responses[operation]
        if queue:
            return queue.popleft()
        if operation == "clear_scroll":
            return SearchResponse(status_code=200, payload={"succeeded": True, "num_freed": 1})
        return error_response(404, f"No scripted response for {operation}")

    def calls_for(self, operation: str) -> List[RecordedCall]:
        """Return recorded calls of one operation, in order."""
        return [call for call in self.calls if call.operation == operation]

    def search(self, index, body, scroll=None, timeout=None) -> SearchResponse:
        return self._next("search", index=index, body=body, scroll=scroll, timeout=timeout)

    def scroll(self, scroll_id, scroll, timeout=None) -> SearchResponse:
        return self._next("scroll", scroll_id=scroll_id, scroll=scroll, timeout=timeout)

    def clear_scroll(self, scroll_id, timeout=None) -> SearchResponse:
        return self._next("clear_scroll", scroll_id=scroll_id, timeout=timeout)

    def ping(self) -> SearchResponse:
        return self._next("ping")

    def cluster_health(self) -> SearchResponse:
        return self._next("cluster_health")

    def root(self) -> SearchResponse:
        return self._next("root")

    def get_name(self) -> str:
        return "scripted"

    def close(self) -> None:
        self.closed = True
