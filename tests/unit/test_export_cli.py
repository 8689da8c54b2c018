"""
Unit tests for the CLI entry point.

Network-facing functions are patched; these tests cover argument
handling and exit codes.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from search_export import export_cli
from search_export.core.models import ExportResult
from search_export.query import QueryTestResult
from search_export.validation import DiagnosisCategory, ValidationResult


@pytest.fixture(autouse=True)
def no_password_env(monkeypatch):
    monkeypatch.delenv("SEARCH_EXPORT_PASSWORD", raising=False)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_export_arguments(self):
        args = export_cli.parse_args([
            "export", "--index", "logs", "--format", "json", "--fields", "a,b", "--batch-size", "100",
        ])

        assert args.command == "export"
        assert args.index == "logs"
        assert args.format == "json"
        assert args.batch_size == 100
        assert args.insecure is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            export_cli.parse_args([])


class TestReadQuery:
    """Tests for inline and file queries."""

    def test_inline(self):
        assert export_cli.read_query('{"match_all": {}}') == '{"match_all": {}}'

    def test_from_file(self, tmp_path):
        path = tmp_path / "q.json"
        path.write_text('{"term": {"a": 1}}', encoding="utf-8")

        assert export_cli.read_query(f"@{path}") == '{"term": {"a": 1}}'

    def test_none(self):
        assert export_cli.read_query(None) is None


class TestMain:
    """Tests for main()."""

    def test_export_success(self, tmp_path):
        result = ExportResult(file_path=tmp_path / "x.csv", total_documents=3, elapsed_seconds=1, file_size_bytes=10)

        with patch.object(export_cli, "export_to_file", return_value=result) as mock_export:
            code = export_cli.main([
                "export", "--index", "logs", "--fields", "a, b", "--output-dir", str(tmp_path),
                "--query", '{"term": {"a": 1}}',
            ])

        assert code == 0
        connection, export, query = mock_export.call_args.args
        assert connection.index == "logs"
        assert export.fields == ("a", "b")
        assert export.output_dir == Path(tmp_path)
        assert query == '{"term": {"a": 1}}'
        assert mock_export.call_args.kwargs["password"] is None

    def test_export_failure_exit_code(self, tmp_path):
        result = ExportResult(
            file_path=tmp_path / "x.csv", total_documents=0, elapsed_seconds=0,
            file_size_bytes=0, success=False, error_message="boom",
        )

        with patch.object(export_cli, "export_to_file", return_value=result):
            assert export_cli.main(["export", "--index", "logs"]) == 1

    def test_invalid_export_setting(self):
        with patch.object(export_cli, "export_to_file") as mock_export:
            code = export_cli.main(["export", "--index", "logs", "--scroll", "forever"])

        assert code == 1
        mock_export.assert_not_called()

    def test_validate(self):
        result = ValidationResult(success=True, message="ok", category=DiagnosisCategory.CLUSTER_ACCESS)

        with patch.object(export_cli, "validate_connection", return_value=result) as mock_validate:
            code = export_cli.main(["validate", "--endpoint", "https://x:9200", "--insecure"])

        assert code == 0
        assert mock_validate.call_args.args[0].ignore_tls_errors is True

    def test_test_query_failure(self):
        result = QueryTestResult(success=False, message="bad query")

        with patch.object(export_cli, "check_query", return_value=result):
            assert export_cli.main(["test-query", "--index", "logs", "--query", "{}"]) == 1

    def test_interrupt(self):
        with patch.object(export_cli, "export_to_file", side_effect=KeyboardInterrupt):
            assert export_cli.main(["export", "--index", "logs"]) == 1

    def test_ask_password(self):
        result = ValidationResult(success=True, message="ok", category=DiagnosisCategory.CLUSTER_ACCESS)

        with patch.object(export_cli.getpass, "getpass", return_value="pw"), \
                patch.object(export_cli, "validate_connection", return_value=result) as mock_validate:
            export_cli.main(["validate", "--ask-password"])

        assert mock_validate.call_args.args[1] == "pw"

    def test_interrupt_at_password_prompt(self):
        with patch.object(export_cli.getpass, "getpass", side_effect=KeyboardInterrupt), \
                patch.object(export_cli, "validate_connection") as mock_validate:
            assert export_cli.main(["validate", "--ask-password"]) == 1

        mock_validate.assert_not_called()
