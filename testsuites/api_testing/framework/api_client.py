"""
================================================================================
API Client
================================================================================

Programmatic HTTP client over a versioned base URL.

Unlike the request agents, the client keeps a mutable set of default
headers (including an optional bearer credential) and returns plain
ApiResponse values:

    >>> with ApiClient(settings=settings) as client:
    ...     client.set_auth_token(token)
    ...     response = client.get("/profile")  # {base_url}/{version}/profile
    ...     response.data["email"]

An ApiClient instance is owned by one caller; set_auth_token() and
clear_auth_token() change the headers of every later request.

Failure handling:
    - Transport errors (DNS, refused connection, timeout) are logged with
      method and URL, then re-raised
    - 4xx/5xx responses are returned like any other response
    - No retries

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx
from loguru import logger

from .config_loader import DEFAULT_API_URL, DEFAULT_API_VERSION, Settings
from .reporting import report_exchange
from .response import ApiResponse
from .token_service import bearer


BODY_METHODS = ("POST", "PUT", "PATCH")

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiClient:
    """
    Configurable request builder exposing get/post/put/patch/delete.

    Args:
        base_url: API root, defaults to settings.api_url
        version: Version segment, defaults to settings.api_version
        headers: Extra default headers merged over DEFAULT_HEADERS
        settings: Source of base_url/version defaults
        transport: Optional httpx transport (in-process targets, mocks)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        version: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (
            base_url or (settings.api_url if settings else DEFAULT_API_URL)
        ).rstrip("/")
        self.version = version or (settings.api_version if settings else DEFAULT_API_VERSION)
        self.headers: Dict[str, str] = {**DEFAULT_HEADERS, **(headers or {})}
        self.session = httpx.Client(transport=transport)

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def get_url(self, endpoint: str) -> str:
        """
        Build the full URL for an endpoint.

        "items" and "/items" both map to {base_url}/{version}/items.
        """
        clean_endpoint = endpoint[1:] if endpoint.startswith("/") else endpoint
        return f"{self.base_url}/{self.version}/{clean_endpoint}"

    def set_auth_token(self, token: str) -> None:
        """Set the bearer credential on the default headers."""
        self.headers["Authorization"] = bearer(token)

    def clear_auth_token(self) -> None:
        """Remove the bearer credential from the default headers."""
        self.headers.pop("Authorization", None)

    def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        custom_headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        """
        Make a request to the API.

        Args:
            method: HTTP method
            endpoint: API endpoint, leading slash optional
            data: Body, JSON-encoded for POST/PUT/PATCH only
            custom_headers: Per-call headers, winning over the defaults

        Returns:
            ApiResponse with status, headers and data

        Raises:
            httpx.TransportError: On network-level failures
        """
        method = method.upper()
        url = self.get_url(endpoint)
        headers = {**self.headers, **(custom_headers or {})}

        kwargs: Dict[str, Any] = {"headers": headers}
        body = data if data is not None and method in BODY_METHODS else None
        if body is not None:
            kwargs["json"] = body

        try:
            response = self.session.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"Error making {method} request to {url}: {e}")
            raise

        result = ApiResponse.from_httpx(response)
        report_exchange(method, url, headers, body, result)
        return result

    def get(self, endpoint: str, custom_headers: Optional[Mapping[str, str]] = None) -> ApiResponse:
        """Execute GET request."""
        return self.request("GET", endpoint, None, custom_headers)

    def post(
        self,
        endpoint: str,
        data: Any = None,
        custom_headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        """Execute POST request."""
        return self.request("POST", endpoint, data, custom_headers)

    def put(
        self,
        endpoint: str,
        data: Any = None,
        custom_headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        """Execute PUT request."""
        return self.request("PUT", endpoint, data, custom_headers)

    def patch(
        self,
        endpoint: str,
        data: Any = None,
        custom_headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        """Execute PATCH request."""
        return self.request("PATCH", endpoint, data, custom_headers)

    def delete(self, endpoint: str, custom_headers: Optional[Mapping[str, str]] = None) -> ApiResponse:
        """Execute DELETE request."""
        return self.request("DELETE", endpoint, None, custom_headers)


__all__ = [
    "ApiClient",
    "DEFAULT_HEADERS",
]
