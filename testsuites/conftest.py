"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the root pytest configuration for the entire test suite.
It registers common markers and tags tests by directory.

================================================================================
"""

from pathlib import Path
from typing import Optional

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests against a running API"
    )
    config.addinivalue_line(
        "markers", "unit: Offline harness tests"
    )
    config.addinivalue_line(
        "markers", "mutation: Mutation/negative tests"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "api: API-specific tests"
    )
    config.addinivalue_line(
        "markers", "public: Endpoints reachable without credentials"
    )
    config.addinivalue_line(
        "markers", "protected: Endpoints requiring a bearer credential"
    )
    config.addinivalue_line(
        "markers", "auth: Tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "requires_external: Tests requiring a running target API"
    )


def suite_for(path: Path) -> Optional[str]:
    """Return the directory directly under testsuites/ that holds a test file."""
    parts = path.parts
    for index in range(len(parts) - 2, -1, -1):
        if parts[index] == "testsuites":
            return parts[index + 1]
    return None


def pytest_collection_modifyitems(config, items):
    """
    Tag collected tests by location.

    api_testing tests talk to a live API; unit tests run offline.
    """
    for item in items:
        suite = suite_for(Path(str(item.fspath)))
        if suite == "api_testing":
            item.add_marker(pytest.mark.api)
            item.add_marker(pytest.mark.e2e)
            item.add_marker(pytest.mark.requires_external)

        if suite == "unit":
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "REST API Integration Test Harness",
        "=" * 60,
        "",
    ]
