"""
Custom exceptions for the search export engine.
"""

from typing import Optional


TLS_MARKERS = ("ssl", "tls", "certificate")


def looks_like_tls_error(message: Optional[str]) -> bool:
    """Return True if a transport message mentions TLS or certificates."""
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in TLS_MARKERS)


class SearchExportError(Exception):
    """Base exception for all search export errors."""
    pass


class ConfigError(SearchExportError):
    """
    Error in export or connection configuration.

    Raised when:
    - Batch size is not a positive integer
    - Scroll timeout is not a valid duration string
    - Export format is unknown
    - A config file is missing or malformed
    """
    pass


class TransportError(SearchExportError):
    """
    The request never produced an HTTP response.

    Raised for timeouts, DNS failures, refused connections and TLS
    negotiation failures.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.possible_tls_issue = looks_like_tls_error(message)


class ServerRejectionError(SearchExportError):
    """The search service answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        reason: str = None,
        error_type: str = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.error_type = error_type


class CursorLifecycleError(ServerRejectionError):
    """A scroll continuation failed after the cursor was opened."""
    pass
