"""
Shared test fixtures and configuration for pytest.
"""

import logging
import os
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


logger = logging.getLogger(__name__)


# ============================================================================
# Environment detection
# ============================================================================

def is_search_service_available() -> bool:
    """Check if a live search service is configured and reachable."""
    endpoint = os.environ.get("SEARCH_EXPORT_TEST_ENDPOINT")
    if not endpoint:
        return False

    try:
        import requests

        response = requests.head(
            endpoint,
            auth=_test_auth(),
            verify=False,
            timeout=5,
        )
        return response.status_code < 500

    except Exception as e:
        logger.debug(f"Search service not available: {e}")
        return False


def _test_auth():
    username = os.environ.get("SEARCH_EXPORT_TEST_USER")
    password = os.environ.get("SEARCH_EXPORT_TEST_PASSWORD")
    if username and password:
        return (username, password)
    return None


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (requires a search service)")


def pytest_collection_modifyitems(config, items):
    """Automatically skip integration tests if no search service is available."""
    if not any("integration" in item.keywords for item in items):
        return
    if is_search_service_available():
        return

    skip_live = pytest.mark.skip(
        reason="Search service not available (set SEARCH_EXPORT_TEST_ENDPOINT)"
    )

    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_live)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def live_service_config() -> dict:
    """Session-scoped fixture providing live search service settings."""
    return {
        "endpoint": os.environ.get("SEARCH_EXPORT_TEST_ENDPOINT", "http://localhost:9200"),
        "index": os.environ.get("SEARCH_EXPORT_TEST_INDEX", "search-export-test"),
        "username": os.environ.get("SEARCH_EXPORT_TEST_USER", ""),
        "password": os.environ.get("SEARCH_EXPORT_TEST_PASSWORD"),
    }


@pytest.fixture
def connection_spec():
    """Fixture providing a connection spec for a local service."""
    from search_export.core.models import ConnectionSpec

    return ConnectionSpec(endpoint="http://localhost:9200", index="logs-2024", username="reader")


@pytest.fixture
def export_spec(tmp_path):
    """Fixture providing a CSV export spec writing under tmp_path."""
    from search_export.core.models import ExportSpec

    return ExportSpec(format="csv", batch_size=3, output_dir=tmp_path / "exports")


@pytest.fixture
def sample_batches():
    """Three heterogeneous batches of documents."""
    return [
        [
            {"id": 1, "message": "started", "level": "info"},
            {"id": 2, "message": "disk, almost full", "host": "db-1"},
            {"id": 3, "level": "warn", "tags": ["a", "b"]},
        ],
        [
            {"id": 4, "message": 'quoted "value"', "level": "error"},
            {"id": 5, "extra": "not in header"},
        ],
        [
            {"id": 6, "message": "line one\nline two", "level": None},
        ],
    ]
