"""
Unit tests for the one-shot query check.
"""

from search_export.connectors.scripted_connector import (
    ScriptedConnector,
    error_response,
    transport_failure,
)
from search_export.core.connector import SearchResponse
from search_export.query import test_query as run_query_test


class TestQueryTester:
    """Tests for test_query."""

    def test_accepted_query(self):
        connector = ScriptedConnector(search=[SearchResponse(200, {"hits": {"total": {"value": 7}, "hits": []}})])

        result = run_query_test(connector, "logs", {"term": {"level": "error"}})

        assert result.success
        assert result.total == 7
        call = connector.calls_for("search")[0]
        assert call.args["body"] == {"query": {"term": {"level": "error"}}, "size": 0}
        assert call.args["scroll"] is None

    def test_complete_request_sent_unmodified(self):
        connector = ScriptedConnector(search=[SearchResponse(200, {})])
        query = {"query": {"match_all": {}}, "size": 10}

        run_query_test(connector, "logs", query)

        assert connector.calls_for("search")[0].args["body"] == query

    def test_rejected_query_reports_reason(self):
        connector = ScriptedConnector(search=[error_response(400, "unknown query [mtch]", "parsing_exception")])

        result = run_query_test(connector, "logs", {"mtch": {}})

        assert not result.success
        assert result.message == "unknown query [mtch]"
        assert result.status_code == 400

    def test_rejection_without_reason(self):
        connector = ScriptedConnector(search=[SearchResponse(500, {})])

        result = run_query_test(connector, "logs", {"match_all": {}})

        assert result.message == "Server responded with an error (HTTP 500)"

    def test_transport_failure(self):
        connector = ScriptedConnector(search=[transport_failure("Read timed out")])

        result = run_query_test(connector, "logs", {"match_all": {}})

        assert not result.success
        assert result.message == "Read timed out"
