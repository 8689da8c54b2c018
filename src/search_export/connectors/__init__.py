"""
Connectors package for search services.
"""

from .http import HttpSearchConnector
from .scripted_connector import (
    ScriptedConnector,
    RecordedCall,
    page_response,
    error_response,
    transport_failure,
)

__all__ = [
    "HttpSearchConnector",
    "ScriptedConnector",
    "RecordedCall",
    "page_response",
    "error_response",
    "transport_failure",
]
