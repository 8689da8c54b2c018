"""
Connection validation and failure diagnosis.

Index read permission and cluster monitoring permission are independent
grants on the search service, so a single probe cannot tell a wrong
password from a correct password with insufficient scope. The validator
runs an ordered chain of increasingly permissive probes and, when all of
them fail, classifies the most informative failure.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ..core.connector import SearchConnector, SearchResponse
from ..core.errors import looks_like_tls_error


logger = logging.getLogger(__name__)

INDEX_PROBE_BODY = {"query": {"match_all": {}}, "size": 0}

PERMISSION_MARKERS = ("no permissions", "security_exception")


class ProbeOutcome(str, Enum):
    """Result of one probe: stop with success, try the next probe, or stop with failure."""
    SUCCESS = "success"
    SOFT_FAIL = "soft_fail"
    HARD_FAIL = "hard_fail"


class DiagnosisCategory(str, Enum):
    """Classification of a validation run."""
    CLUSTER_ACCESS = "cluster_access"
    INDEX_ACCESS = "index_access"
    AUTHORIZATION_FAILURE = "authorization_failure"
    AUTHENTICATION_CONFIG_FAILURE = "authentication_config_failure"
    AUTHENTICATION_FAILURE = "authentication_failure"
    TRANSPORT_FAILURE = "transport_failure"
    SERVER_FAILURE = "server_failure"


@dataclass
class ProbeResult:
    """Outcome of a single probe."""
    outcome: ProbeOutcome
    response: Optional[SearchResponse] = None
    message: Optional[str] = None


@dataclass
class Probe:
    """A named probe in the validation chain."""
    name: str
    run: Callable[[], ProbeResult]


@dataclass
class ProbeAttempt:
    """Record of one executed probe."""
    name: str
    outcome: ProbeOutcome
    status_code: Optional[int] = None
    response: Optional[SearchResponse] = None


@dataclass
class ValidationResult:
    """
    Result of a validation run.

    Attributes:
        success: Whether any probe succeeded
        message: Human-readable outcome or diagnosis
        category: Classification of the outcome
        probe: Name of the probe that succeeded
        status_code: HTTP status of the diagnosed failure
        server_reason: Structured reason from the server
        transport_error: Transport exception message
        possible_tls_issue: Transport error mentions TLS or certificates
        attempts: Every probe that ran, in order
    """
    success: bool
    message: str
    category: DiagnosisCategory
    probe: Optional[str] = None
    status_code: Optional[int] = None
    server_reason: Optional[str] = None
    transport_error: Optional[str] = None
    possible_tls_issue: bool = False
    attempts: List[ProbeAttempt] = field(default_factory=list)


def evaluate_response(response: SearchResponse) -> ProbeOutcome:
    """
    Map a probe response to a tri-state outcome.

    Every non-success is a soft failure; HARD_FAIL is only produced by
    custom probes.
    """
    if response.ok:
        return ProbeOutcome.SUCCESS
    return ProbeOutcome.SOFT_FAIL


def _call(fn: Callable[[], SearchResponse]) -> ProbeResult:
    response = fn()
    return ProbeResult(outcome=evaluate_response(response), response=response)


class ConnectionValidator:
    """
    Runs the probe chain against a search service.

    Default chain:
    1. ping: HEAD /
    2. cluster_health: GET /_cluster/health
    3. root: GET /
    4. index_query: zero-size match_all against the target index

    Probes can be appended or replaced without touching the control flow.
    """

    def __init__(
        self,
        connector: SearchConnector,
        index: str = "",
        probes: Optional[List[Probe]] = None,
    ):
        self.connector = connector
        self.index = index
        self.probes = probes if probes is not None else self.default_probes()

    def default_probes(self) -> List[Probe]:
        return [
            Probe("ping", lambda: _call(self.connector.ping)),
            Probe("cluster_health", self._probe_cluster_health),
            Probe("root", lambda: _call(self.connector.root)),
            Probe("index_query", self._probe_index_query),
        ]

    def _probe_cluster_health(self) -> ProbeResult:
        result = _call(self.connector.cluster_health)
        if result.outcome == ProbeOutcome.SUCCESS:
            payload = result.response.payload
            result.message = (
                f"Cluster name: {payload.get('cluster_name', 'unknown')}\n"
                f"Status: {payload.get('status', 'unknown')}"
            )
        return result

    def _probe_index_query(self) -> ProbeResult:
        if not self.index:
            return ProbeResult(outcome=ProbeOutcome.SOFT_FAIL, message="No index configured")
        result = _call(lambda: self.connector.search(self.index, dict(INDEX_PROBE_BODY)))
        if result.outcome == ProbeOutcome.SUCCESS:
            result.message = (
                f"Index: {self.index}\n"
                "You have read access to this index; exports are available."
            )
        return result

    def validate(self) -> ValidationResult:
        """
        Run probes in order until one succeeds or one hard-fails.

        Returns:
            ValidationResult describing the succeeding probe or the
            classified failure
        """
        logger.info(f"Validating connection via {self.connector.get_name()} (index={self.index or '-'})")
        attempts: List[ProbeAttempt] = []

        for probe in self.probes:
            logger.debug(f"Trying probe: {probe.name}")
            try:
                result = probe.run()
            except Exception as e:
                logger.debug(f"Probe {probe.name} raised: {e}")
                result = ProbeResult(
                    outcome=ProbeOutcome.SOFT_FAIL,
                    response=SearchResponse(status_code=0, error_message=str(e)),
                )

            status_code = result.response.status_code if result.response else None
            attempts.append(ProbeAttempt(
                name=probe.name,
                outcome=result.outcome,
                status_code=status_code,
                response=result.response,
            ))

            if result.outcome == ProbeOutcome.SUCCESS:
                category = (
                    DiagnosisCategory.INDEX_ACCESS
                    if probe.name == "index_query"
                    else DiagnosisCategory.CLUSTER_ACCESS
                )
                message = f"Connection validated ({probe.name})"
                if result.message:
                    message = f"{message}\n{result.message}"
                logger.info(f"Connection validated via probe: {probe.name}")
                return ValidationResult(
                    success=True,
                    message=message,
                    category=category,
                    probe=probe.name,
                    status_code=status_code,
                    attempts=attempts,
                )

            logger.debug(f"Probe {probe.name} failed (HTTP {status_code})")
            if result.outcome == ProbeOutcome.HARD_FAIL:
                break

        logger.warning("All validation probes failed, diagnosing")
        result = self.diagnose(attempts)
        logger.warning(f"Connection validation failed:\n{result.message}")
        return result

    def diagnose(self, attempts: List[ProbeAttempt]) -> ValidationResult:
        """Classify the failure of a probe chain where nothing succeeded."""
        primary = _primary_response(attempts)
        status_code = primary.status_code if primary else None
        server_reason = primary.error_reason if primary else None
        transport_error = next(
            (a.response.error_message for a in attempts if a.response and a.response.error_message),
            None,
        )
        possible_tls_issue = any(
            looks_like_tls_error(a.response.error_message) for a in attempts if a.response
        )

        lines = [f"HTTP status: {status_code if status_code else 'no response'}"]

        if status_code == 403:
            if _is_permission_denial(primary):
                category = DiagnosisCategory.AUTHORIZATION_FAILURE
                lines.extend([
                    "403 Forbidden - insufficient permissions (authentication succeeded):",
                    "  - Credentials are valid",
                    "  - The user lacks the required access rights",
                    "",
                    "  Ask an administrator to grant:",
                    "    - cluster:monitor/health (cluster monitor)",
                    "    - indices:data/read/* (index read)",
                    f"    - access to the specific index: {self.index or '<index>'}",
                    "  Or use an account with sufficient privileges, and check the",
                    "  security plugin role mappings.",
                ])
            else:
                category = DiagnosisCategory.AUTHENTICATION_CONFIG_FAILURE
                lines.extend([
                    "403 Forbidden - authentication or configuration problem:",
                    "  1. Verify the password (passwords are case-sensitive)",
                    "  2. Confirm the account has basic access rights",
                    "  3. Check that basic authentication is enabled on the server",
                    "  4. Check the server-side security plugin configuration",
                ])
        elif status_code == 401:
            category = DiagnosisCategory.AUTHENTICATION_FAILURE
            lines.extend([
                "401 Unauthorized - authentication failed:",
                "  1. Username or password is incorrect",
                "  2. The account may be locked or disabled",
            ])
        elif not status_code:
            category = DiagnosisCategory.TRANSPORT_FAILURE
        else:
            category = DiagnosisCategory.SERVER_FAILURE

        if transport_error:
            lines.append(f"\nTransport error: {transport_error}")
        if server_reason:
            lines.append(f"Server error: {server_reason}")
        if possible_tls_issue:
            lines.append("\nPossible TLS negotiation issue (reported even when certificate checks are disabled)")

        return ValidationResult(
            success=False,
            message="\n".join(lines),
            category=category,
            status_code=status_code,
            server_reason=server_reason,
            transport_error=transport_error,
            possible_tls_issue=possible_tls_issue,
            attempts=attempts,
        )


# Probes whose failures carry the most detail come first
_DIAGNOSIS_PREFERENCE = ("cluster_health", "ping", "root", "index_query")


def _primary_response(attempts: List[ProbeAttempt]) -> Optional[SearchResponse]:
    by_name = {a.name: a.response for a in attempts if a.response is not None}
    ordered = [by_name[name] for name in _DIAGNOSIS_PREFERENCE if name in by_name]
    ordered.extend(r for name, r in by_name.items() if name not in _DIAGNOSIS_PREFERENCE)
    for response in ordered:
        if response.status_code:
            return response
    return ordered[0] if ordered else None


def _is_permission_denial(response: SearchResponse) -> bool:
    text = " ".join(filter(None, [response.error_reason, response.error_type])).lower()
    return any(marker in text for marker in PERMISSION_MARKERS)
