"""
================================================================================
API Testing Framework
================================================================================

Integration-test harness for REST APIs.

Modules:
    - config_loader: YAML + environment configuration, Settings
    - token_service: JWT test identities
    - request_factory: chainable request agents and the authenticated wrapper
    - api_client: programmatic client over a versioned base URL
    - assertions: status/body assertion helpers
    - reporting: Allure exchange reporting with redaction
    - log_config: Loguru setup

Author: Automation Team
License: MIT
================================================================================
"""

from . import assertions
from .api_client import ApiClient
from .config_loader import ConfigLoader, ConfigurationError, Settings, load_settings
from .request_factory import (
    AuthenticatedRequest,
    AuthenticatedRequestAgent,
    PendingRequest,
    RequestAgent,
    RequestError,
    RequestIssuer,
    create_authenticated_request,
    create_request,
)
from .response import ApiResponse
from .token_service import AuthContext, TokenError, TokenService

__all__ = [
    "assertions",
    "ApiClient",
    "ApiResponse",
    "AuthContext",
    "AuthenticatedRequest",
    "AuthenticatedRequestAgent",
    "ConfigLoader",
    "ConfigurationError",
    "PendingRequest",
    "RequestAgent",
    "RequestError",
    "RequestIssuer",
    "Settings",
    "TokenError",
    "TokenService",
    "create_authenticated_request",
    "create_request",
    "load_settings",
]
