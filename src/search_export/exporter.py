"""
Programmatic entry points.

Each function builds an HTTP connector for one call and closes it when
done.
"""

import logging
from typing import Any, Optional

from .connectors.http import HttpSearchConnector, DEFAULT_TIMEOUT
from .core.models import ConnectionSpec, ExportResult, ExportSpec
from .query.tester import QueryTestResult, test_query
from .runner.export_runner import DEFAULT_RELEASE_TIMEOUT, ScrollExportRunner
from .runner.progress import ProgressReporter
from .validation.connection_validator import ConnectionValidator, ValidationResult


logger = logging.getLogger(__name__)


def build_connector(
    connection: ConnectionSpec,
    password: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> HttpSearchConnector:
    """Create an HTTP connector for a ConnectionSpec."""
    return HttpSearchConnector(
        endpoint=connection.endpoint,
        username=connection.username,
        password=password,
        ignore_tls_errors=connection.ignore_tls_errors,
        timeout=timeout,
    )


def export_to_file(
    connection: ConnectionSpec,
    export: ExportSpec,
    query: Any,
    password: Optional[str] = None,
    progress: Optional[ProgressReporter] = None,
    request_timeout: float = DEFAULT_TIMEOUT,
    release_timeout: float = DEFAULT_RELEASE_TIMEOUT,
) -> ExportResult:
    """
    Export every document matching query to a file under export.output_dir.

    Returns:
        ExportResult; check success and error_message for failures
    """
    connector = build_connector(connection, password, timeout=request_timeout)
    try:
        runner = ScrollExportRunner(
            connector,
            connection,
            export,
            progress=progress,
            request_timeout=request_timeout,
            release_timeout=release_timeout,
        )
        return runner.run(query)
    finally:
        connector.close()


def validate_connection(
    connection: ConnectionSpec,
    password: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> ValidationResult:
    """Run the connection probe chain and return its diagnosis."""
    logger.info(
        f"Validating connection: endpoint={connection.endpoint}, user={connection.username or '-'}, "
        f"ignore_tls_errors={connection.ignore_tls_errors}"
    )
    connector = build_connector(connection, password, timeout=timeout)
    try:
        return ConnectionValidator(connector, index=connection.index).validate()
    finally:
        connector.close()


def check_query(
    connection: ConnectionSpec,
    query: Any,
    password: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> QueryTestResult:
    """Send query once against the target index and report whether it is accepted."""
    connector = build_connector(connection, password, timeout=timeout)
    try:
        return test_query(connector, connection.index, query)
    finally:
        connector.close()
