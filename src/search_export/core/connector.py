"""
Connector interface for talking to the search service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import (
    CursorLifecycleError,
    ServerRejectionError,
    TransportError,
    looks_like_tls_error,
)
from .models import Batch


@dataclass
class SearchResponse:
    """
    Response from the search service.

    A status code of 0 means the request never got an HTTP answer; the
    transport exception text is then in error_message.

    Attributes:
        status_code: HTTP status code (0 for transport failures)
        payload: Response body parsed as JSON
        headers: Response headers
        duration_ms: Time taken for the request in milliseconds
        error_message: Transport exception message, if any
    """
    status_code: int
    payload: Dict[str, Any] = field(default_factory=dict)
    headers: Optional[Dict[str, str]] = None
    duration_ms: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def scroll_id(self) -> Optional[str]:
        return self.payload.get("_scroll_id")

    @property
    def hits(self) -> Batch:
        """Source documents of the returned hits, in order."""
        hits = self.payload.get("hits") or {}
        return [hit.get("_source") or {} for hit in hits.get("hits") or []]

    @property
    def total(self) -> int:
        """Total-count estimate; 0 when the service omits it."""
        hits = self.payload.get("hits") or {}
        total = hits.get("total")
        if isinstance(total, dict):
            total = total.get("value")
        return total if isinstance(total, int) and not isinstance(total, bool) else 0

    @property
    def error_type(self) -> Optional[str]:
        error = self.payload.get("error")
        if isinstance(error, dict):
            return error.get("type")
        return None

    @property
    def error_reason(self) -> Optional[str]:
        """
        Human-readable reason from a structured error body.

        Falls back to the first root cause, then to a plain string error.
        """
        error = self.payload.get("error")
        if isinstance(error, str):
            return error
        if not isinstance(error, dict):
            return None
        if error.get("reason"):
            return error["reason"]
        for cause in error.get("root_cause") or []:
            if isinstance(cause, dict) and cause.get("reason"):
                return cause["reason"]
        return None


def describe_failure(response: SearchResponse, action: str) -> str:
    """
    Build a caller-facing message for a failed request.

    The structured server reason is preferred over the generic status
    message, and transport messages are tagged when they mention TLS.
    """
    if response.status_code == 0:
        message = f"{action} failed: {response.error_message or 'no response from server'}"
        if looks_like_tls_error(response.error_message):
            message += " (possible TLS negotiation issue)"
        return message

    reason = response.error_reason
    if reason:
        message = f"{action} failed (HTTP {response.status_code}): {reason}"
        if response.error_type:
            message += f" [{response.error_type}]"
    else:
        message = f"{action} failed: server responded with HTTP {response.status_code}"
    if response.error_message:
        message += f" ({response.error_message})"
    return message


def raise_for_response(response: SearchResponse, action: str, during_scroll: bool = False) -> None:
    """Raise the matching SearchExportError subclass if response is not a success."""
    if response.ok:
        return
    message = describe_failure(response, action)
    if response.status_code == 0:
        raise TransportError(message)
    error_class = CursorLifecycleError if during_scroll else ServerRejectionError
    raise error_class(
        message,
        status_code=response.status_code,
        reason=response.error_reason,
        error_type=response.error_type,
    )


class SearchConnector(ABC):
    """
    Abstract base class for search service connectors.

    Every call returns a SearchResponse instead of raising, so callers
    can inspect status codes and structured errors uniformly.
    """

    @abstractmethod
    def search(
        self,
        index: str,
        body: Dict[str, Any],
        scroll: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> SearchResponse:
        """
        Run a search against index, optionally opening a scroll cursor.

        Args:
            index: Target index or pattern
            body: Complete request body
            scroll: Cursor lifetime; no cursor is opened when None
            timeout: Per-request timeout override in seconds
        """
        pass

    @abstractmethod
    def scroll(self, scroll_id: str, scroll: str, timeout: Optional[float] = None) -> SearchResponse:
        """Fetch the next batch for scroll_id, extending its lifetime."""
        pass

    @abstractmethod
    def clear_scroll(self, scroll_id: str, timeout: Optional[float] = None) -> SearchResponse:
        """Release the cursor identified by scroll_id."""
        pass

    @abstractmethod
    def ping(self) -> SearchResponse:
        """Lightweight reachability probe (HEAD /)."""
        pass

    @abstractmethod
    def cluster_health(self) -> SearchResponse:
        """Cluster health probe (GET /_cluster/health)."""
        pass

    @abstractmethod
    def root(self) -> SearchResponse:
        """Root endpoint probe (GET /)."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the connector name/identifier."""
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass
