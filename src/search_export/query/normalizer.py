"""
Query normalization.

Decides whether a user-supplied query is a complete search request (it
has a top-level "query" key) or a bare clause that must be wrapped, and
produces a well-formed request body.
"""

import copy
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from ..core.models import ExportSpec


logger = logging.getLogger(__name__)

_UNPARSED = object()


class TransportPath(str, Enum):
    """
    How the request body was produced.

    RAW: the caller's complete request is forwarded as-is.
    STRUCTURED: the body was built around a bare clause.
    """
    RAW = "raw"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class NormalizedQuery:
    """A request body ready for transmission and the path that built it."""
    body: Dict[str, Any]
    path: TransportPath

    @property
    def is_complete_request(self) -> bool:
        return self.path == TransportPath.RAW


def _serialize(document: Any) -> str:
    if isinstance(document, bytes):
        return document.decode("utf-8", errors="replace")
    if isinstance(document, str):
        return document
    try:
        return json.dumps(document, default=str)
    except (TypeError, ValueError):
        return str(document)


def _parse(document: Any) -> Any:
    """Serialize then parse document; returns _UNPARSED on failure."""
    try:
        return json.loads(_serialize(document))
    except ValueError:
        return _UNPARSED


def normalize_query(document: Any, export: ExportSpec) -> NormalizedQuery:
    """
    Build the initial search body for an export.

    Complete requests keep every key and only gain "size" (when absent)
    and a "_source" restriction (when fields are configured). Anything
    else becomes {"query": <value>} with the same injections. Input that
    cannot be parsed is wrapped as a clause rather than rejected; the
    server reports what is wrong with it.

    Args:
        document: Query object, JSON text, or bare clause
        export: Export settings supplying batch size and fields

    Returns:
        NormalizedQuery with the body and chosen transport path
    """
    parsed = _parse(document)

    if isinstance(parsed, dict) and "query" in parsed:
        logger.debug("Complete request detected, forwarding as-is")
        body = copy.deepcopy(parsed)
        body.setdefault("size", export.batch_size)
        if export.fields:
            body["_source"] = list(export.fields)
        return NormalizedQuery(body=body, path=TransportPath.RAW)

    if parsed is _UNPARSED:
        logger.warning("Query could not be parsed, wrapping it as a clause")
        clause = _serialize(document)
    else:
        logger.debug("Bare query clause detected, wrapping under 'query'")
        clause = parsed

    body = {"query": clause, "size": export.batch_size}
    if export.fields:
        body["_source"] = list(export.fields)
    return NormalizedQuery(body=body, path=TransportPath.STRUCTURED)


def build_test_body(document: Any) -> NormalizedQuery:
    """
    Build a zero-size body for checking a query against the server.

    Complete requests are sent unmodified; clauses are wrapped with
    "size": 0 so only the hit count is computed.
    """
    parsed = _parse(document)
    if isinstance(parsed, dict) and "query" in parsed:
        return NormalizedQuery(body=copy.deepcopy(parsed), path=TransportPath.RAW)

    clause = _serialize(document) if parsed is _UNPARSED else parsed
    return NormalizedQuery(body={"query": clause, "size": 0}, path=TransportPath.STRUCTURED)
