"""
Unit tests for the connection validator probe chain.
"""

from search_export.connectors.scripted_connector import (
    ScriptedConnector,
    error_response,
    page_response,
    transport_failure,
)
from search_export.core.connector import SearchResponse
from search_export.validation import (
    ConnectionValidator,
    DiagnosisCategory,
    Probe,
    ProbeOutcome,
    ProbeResult,
)


def ok(payload=None):
    return SearchResponse(status_code=200, payload=payload or {})


NO_PERMISSIONS = error_response(
    403,
    "no permissions for [cluster:monitor/health] and User [name=reader]",
    "security_exception",
)


class TestProbeChain:
    """Tests for probe ordering and early success."""

    def test_ping_success_stops_chain(self):
        """Test the first successful probe ends validation."""
        connector = ScriptedConnector(ping=[ok()])

        result = ConnectionValidator(connector, index="logs").validate()

        assert result.success
        assert result.probe == "ping"
        assert result.category == DiagnosisCategory.CLUSTER_ACCESS
        assert [c.operation for c in connector.calls] == ["ping"]

    def test_cluster_health_message(self):
        """Test cluster name and status are reported."""
        connector = ScriptedConnector(
            ping=[error_response(403, "forbidden")],
            cluster_health=[ok({"cluster_name": "prod", "status": "green"})],
        )

        result = ConnectionValidator(connector, index="logs").validate()

        assert result.success
        assert result.probe == "cluster_health"
        assert "prod" in result.message
        assert "green" in result.message

    def test_index_level_access_after_cluster_denials(self):
        """Test 403 on probes 1-3 followed by a successful index query is a success."""
        connector = ScriptedConnector(
            ping=[NO_PERMISSIONS],
            cluster_health=[NO_PERMISSIONS],
            root=[NO_PERMISSIONS],
            search=[ok({"hits": {"total": {"value": 10}, "hits": []}})],
        )

        result = ConnectionValidator(connector, index="logs").validate()

        assert result.success
        assert result.probe == "index_query"
        assert result.category == DiagnosisCategory.INDEX_ACCESS
        assert [a.outcome for a in result.attempts] == [
            ProbeOutcome.SOFT_FAIL,
            ProbeOutcome.SOFT_FAIL,
            ProbeOutcome.SOFT_FAIL,
            ProbeOutcome.SUCCESS,
        ]
        search_call = connector.calls_for("search")[0]
        assert search_call.args["index"] == "logs"
        assert search_call.args["body"] == {"query": {"match_all": {}}, "size": 0}

    def test_index_probe_skipped_without_index(self):
        """Test no index query is sent when no index is configured."""
        connector = ScriptedConnector(
            ping=[NO_PERMISSIONS], cluster_health=[NO_PERMISSIONS], root=[NO_PERMISSIONS]
        )

        result = ConnectionValidator(connector, index="").validate()

        assert not result.success
        assert connector.calls_for("search") == []

    def test_unauthorized_runs_full_chain(self):
        """Test a 401 on every probe still tries all four before diagnosing."""
        unauthorized = error_response(401, "Unauthorized")
        connector = ScriptedConnector(
            ping=[unauthorized], cluster_health=[unauthorized], root=[unauthorized], search=[unauthorized]
        )

        result = ConnectionValidator(connector, index="logs").validate()

        assert not result.success
        assert result.category == DiagnosisCategory.AUTHENTICATION_FAILURE
        assert [c.operation for c in connector.calls] == ["ping", "cluster_health", "root", "search"]
        assert "401" in result.message

    def test_unauthorized_ping_then_index_access(self):
        """Test a 401 on the ping probe does not hide a readable index."""
        connector = ScriptedConnector(
            ping=[error_response(401, "Unauthorized")],
            search=[page_response([], total=3)],
        )

        result = ConnectionValidator(connector, index="logs").validate()

        assert result.success
        assert result.category == DiagnosisCategory.INDEX_ACCESS
        assert [a.name for a in result.attempts] == ["ping", "cluster_health", "root", "index_query"]

    def test_custom_hard_failure_stops_chain(self):
        """Test a probe returning HARD_FAIL ends the chain."""
        calls = []

        def fatal():
            calls.append("fatal")
            return ProbeResult(outcome=ProbeOutcome.HARD_FAIL, response=error_response(401, "Unauthorized"))

        def never():
            calls.append("never")
            return ProbeResult(outcome=ProbeOutcome.SUCCESS, response=ok())

        validator = ConnectionValidator(ScriptedConnector(), probes=[Probe("fatal", fatal), Probe("never", never)])

        result = validator.validate()

        assert not result.success
        assert result.category == DiagnosisCategory.AUTHENTICATION_FAILURE
        assert calls == ["fatal"]

    def test_custom_probe_list(self):
        """Test probes can be supplied without changing the control flow."""
        calls = []

        def first():
            calls.append("first")
            return ProbeResult(outcome=ProbeOutcome.SOFT_FAIL, response=error_response(503, "busy"))

        def second():
            calls.append("second")
            return ProbeResult(outcome=ProbeOutcome.SUCCESS, response=ok(), message="custom")

        validator = ConnectionValidator(
            ScriptedConnector(), probes=[Probe("first", first), Probe("second", second)]
        )

        result = validator.validate()

        assert result.success
        assert result.probe == "second"
        assert "custom" in result.message
        assert calls == ["first", "second"]

    def test_probe_exception_treated_as_soft_failure(self):
        def broken():
            raise RuntimeError("probe crashed")

        validator = ConnectionValidator(
            ScriptedConnector(), probes=[Probe("broken", broken), Probe("ok", lambda: ProbeResult(ProbeOutcome.SUCCESS, ok()))]
        )

        assert validator.validate().probe == "ok"


class TestDiagnosis:
    """Tests for failure classification when every probe fails."""

    def test_permission_denial_is_authorization_failure(self):
        """Test 403 with security markers names the missing privileges."""
        connector = ScriptedConnector(
            ping=[NO_PERMISSIONS],
            cluster_health=[NO_PERMISSIONS],
            root=[NO_PERMISSIONS],
            search=[NO_PERMISSIONS],
        )

        result = ConnectionValidator(connector, index="logs").validate()

        assert not result.success
        assert result.category == DiagnosisCategory.AUTHORIZATION_FAILURE
        assert result.status_code == 403
        assert "cluster:monitor/health" in result.message
        assert "indices:data/read/*" in result.message
        assert "logs" in result.message
        assert "Credentials are valid" in result.message

    def test_plain_forbidden_is_authentication_config_failure(self):
        """Test 403 without security markers points at password or plugin config."""
        forbidden = error_response(403, "Forbidden")
        connector = ScriptedConnector(
            ping=[forbidden], cluster_health=[forbidden], root=[forbidden], search=[forbidden]
        )

        result = ConnectionValidator(connector, index="logs").validate()

        assert result.category == DiagnosisCategory.AUTHENTICATION_CONFIG_FAILURE
        assert "password" in result.message

    def test_tls_transport_error_flagged(self):
        """Test certificate wording in transport errors is flagged as a TLS issue."""
        tls = transport_failure("[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed")
        connector = ScriptedConnector(ping=[tls], cluster_health=[tls], root=[tls], search=[tls])

        result = ConnectionValidator(connector, index="logs").validate()

        assert not result.success
        assert result.category == DiagnosisCategory.TRANSPORT_FAILURE
        assert result.possible_tls_issue
        assert "TLS" in result.message
        assert "CERTIFICATE_VERIFY_FAILED" in result.transport_error

    def test_connection_refused_is_not_tls(self):
        refused = transport_failure("Connection refused")
        connector = ScriptedConnector(ping=[refused], cluster_health=[refused], root=[refused], search=[refused])

        result = ConnectionValidator(connector, index="logs").validate()

        assert result.category == DiagnosisCategory.TRANSPORT_FAILURE
        assert not result.possible_tls_issue

    def test_server_error_classified(self):
        down = error_response(503, "master_not_discovered_exception")
        connector = ScriptedConnector(ping=[down], cluster_health=[down], root=[down], search=[down])

        result = ConnectionValidator(connector, index="logs").validate()

        assert result.category == DiagnosisCategory.SERVER_FAILURE
        assert result.server_reason == "master_not_discovered_exception"
