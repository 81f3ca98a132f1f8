"""
================================================================================
API Testing Pytest Configuration
================================================================================

Shared fixtures and configuration for end-to-end tests against a running
API (API_URL).

Fixtures:
    - config / settings: Configuration loaded once per session
    - token_service: JWT test identities
    - request: Plain request agent bound to API_URL
    - auth: Authenticated request agent with its user and token
    - api_client: Versioned programmatic client

The whole directory is skipped when GET /health cannot be reached.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Generator

import httpx
import pytest
from loguru import logger

from ..framework import (
    ApiClient,
    AuthenticatedRequest,
    ConfigLoader,
    RequestAgent,
    Settings,
    TokenService,
    create_authenticated_request,
    create_request,
)


# =============================================================================
# Session-Scoped Fixtures (Shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def config() -> ConfigLoader:
    """
    Provide configuration loader instance.

    Session-scoped to ensure configuration is loaded only once.
    """
    return ConfigLoader()


@pytest.fixture(scope="session")
def settings(config: ConfigLoader) -> Settings:
    """Immutable settings shared by every component."""
    return Settings.from_loader(config)


@pytest.fixture(scope="session", autouse=True)
def _require_target_api(settings: Settings) -> None:
    """Skip end-to-end tests when the target API is not running."""
    health_url = f"{settings.api_url}/health"
    try:
        httpx.get(health_url, timeout=3.0)
    except httpx.TransportError as e:
        logger.warning(f"Target API unreachable at {health_url}: {e}")
        pytest.skip(f"Target API not reachable at {settings.api_url}")


@pytest.fixture(scope="session")
def token_service(settings: Settings) -> TokenService:
    return TokenService(settings)


# =============================================================================
# Function-Scoped Fixtures (Fresh for each test)
# =============================================================================

@pytest.fixture
def request_agent(settings: Settings) -> RequestAgent:
    """
    Plain request agent bound to API_URL.

    Usage:
        def test_example(request_agent):
            response = request_agent.get("/health").execute()
            assert response.status == 200
    """
    return create_request(settings=settings)


@pytest.fixture
def auth(settings: Settings, token_service: TokenService) -> AuthenticatedRequest:
    """Authenticated request agent acting as the default test user."""
    return create_authenticated_request(settings=settings, token_service=token_service)


@pytest.fixture
def api_client(settings: Settings) -> Generator[ApiClient, None, None]:
    with ApiClient(settings=settings) as client:
        yield client


# =============================================================================
# Test Data Fixtures
# =============================================================================

@pytest.fixture
def order_data() -> Dict[str, Any]:
    """Generate valid order creation data."""
    return {
        "items": [
            {"productId": "product-1", "quantity": 2},
            {"productId": "product-2", "quantity": 1},
        ],
        "shippingAddress": {
            "street": "123 Test St",
            "city": "Test City",
            "zipCode": "12345",
        },
    }


@pytest.fixture
def profile_updates() -> Dict[str, Any]:
    return {
        "name": "Updated Name",
        "phoneNumber": "555-123-4567",
    }


# =============================================================================
# Allure Reporting Hooks
# =============================================================================

def pytest_exception_interact(node, call, report):
    """Attach additional info on test failure."""
    import allure

    if report.failed:
        allure.attach(
            str(call.excinfo.value),
            name="Error Details",
            attachment_type=allure.attachment_type.TEXT
        )
