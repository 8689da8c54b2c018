"""
Query shaping for search requests.
"""

from .normalizer import NormalizedQuery, TransportPath, normalize_query, build_test_body
from .tester import QueryTestResult, test_query

__all__ = [
    "NormalizedQuery",
    "TransportPath",
    "normalize_query",
    "build_test_body",
    "QueryTestResult",
    "test_query",
]
