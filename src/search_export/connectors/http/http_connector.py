"""
HTTP connector for OpenSearch/Elasticsearch compatible search services.
"""

import json
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
import urllib3

from ...core.connector import SearchConnector, SearchResponse


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpSearchConnector(SearchConnector):
    """
    Search connector backed by a requests session.

    Supports:
    - Basic authentication (only when both username and password are set)
    - Optional TLS verification bypass
    - Scroll search, continuation and release
    - Reachability probes used by the connection validator

    Requests are never retried; every failure is returned to the caller.
    """

    def __init__(
        self,
        endpoint: str,
        username: str = "",
        password: Optional[str] = None,
        ignore_tls_errors: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        name: str = "http",
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the HTTP connector.

        Args:
            endpoint: Base URL of the search service
            username: Basic auth user
            password: Basic auth password (held in memory only)
            ignore_tls_errors: Disable certificate verification
            timeout: Default request timeout in seconds
            name: Connector name
            user_agent: Custom User-Agent header
        """
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.name = name
        self.user_agent = user_agent or "SearchExport/1.0"
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        })

        if username and password:
            self.session.auth = (username, password)

        if ignore_tls_errors:
            self.session.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def _url(self, path: str) -> str:
        return f"{self.endpoint}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> SearchResponse:
        """Execute one HTTP request and wrap the outcome."""
        url = self._url(path)
        data = None
        headers = {}
        if body is not None:
            data = json.dumps(body, ensure_ascii=False, default=str).encode("utf-8")
            headers["Content-Type"] = "application/json"

        start_time = time.time()
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=timeout or self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.debug(f"{method} {url} raised {type(e).__name__}: {e}")
            return SearchResponse(
                status_code=0,
                payload={},
                duration_ms=int((time.time() - start_time) * 1000),
                error_message=str(e),
            )

        duration_ms = int((time.time() - start_time) * 1000)

        # HEAD responses and some proxies return no JSON body
        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {"text": response.text}
        if not isinstance(payload, dict):
            payload = {"body": payload}

        logger.debug(f"{method} {url} -> HTTP {response.status_code} in {duration_ms}ms")
        return SearchResponse(
            status_code=response.status_code,
            payload=payload,
            headers=dict(response.headers),
            duration_ms=duration_ms,
        )

    def search(
        self,
        index: str,
        body: Dict[str, Any],
        scroll: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> SearchResponse:
        params = {"scroll": scroll} if scroll else None
        path = f"{quote(index, safe=',*')}/_search"
        return self._request("POST", path, body=body, params=params, timeout=timeout)

    def scroll(self, scroll_id: str, scroll: str, timeout: Optional[float] = None) -> SearchResponse:
        body = {"scroll": scroll, "scroll_id": scroll_id}
        return self._request("POST", "_search/scroll", body=body, timeout=timeout)

    def clear_scroll(self, scroll_id: str, timeout: Optional[float] = None) -> SearchResponse:
        body = {"scroll_id": [scroll_id]}
        return self._request("DELETE", "_search/scroll", body=body, timeout=timeout)

    def ping(self) -> SearchResponse:
        return self._request("HEAD", "/")

    def cluster_health(self) -> SearchResponse:
        return self._request("GET", "_cluster/health")

    def root(self) -> SearchResponse:
        return self._request("GET", "/")

    def get_name(self) -> str:
        """Return the connector name."""
        return self.name

    def close(self) -> None:
        """Close the session."""
        if self.session:
            self.session.close()
