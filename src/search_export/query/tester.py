"""
One-shot query check against the target index.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..core.connector import SearchConnector
from .normalizer import build_test_body


logger = logging.getLogger(__name__)


@dataclass
class QueryTestResult:
    """Outcome of a query check."""
    success: bool
    message: str
    status_code: Optional[int] = None
    total: Optional[int] = None


def test_query(connector: SearchConnector, index: str, document: Any) -> QueryTestResult:
    """
    Send a query once with zero size and report whether the server accepts it.

    Args:
        connector: Connector for the search service
        index: Target index or pattern
        document: Query object, JSON text, or bare clause

    Returns:
        QueryTestResult with the server's structured reason on rejection
    """
    normalized = build_test_body(document)
    logger.info(f"Testing query against {index} ({normalized.path.value} body)")

    response = connector.search(index, normalized.body)

    if response.ok:
        return QueryTestResult(
            success=True,
            message="Query syntax is valid and was accepted by the server.",
            status_code=response.status_code,
            total=response.total,
        )

    logger.warning(f"Query test failed: HTTP {response.status_code} {response.payload}")
    if response.status_code == 0:
        message = response.error_message or "No response from server"
    else:
        message = response.error_reason or f"Server responded with an error (HTTP {response.status_code})"
    return QueryTestResult(success=False, message=message, status_code=response.status_code)


# Not a pytest test function
test_query.__test__ = False
