"""
================================================================================
Unit Test Fixtures
================================================================================

Offline fixtures: fixed settings, a token service, and an in-process stub
of the target API served through httpx.MockTransport.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from testsuites.api_testing.framework.config_loader import Settings
from testsuites.api_testing.framework.token_service import TokenService


UNIT_SECRET = "unit-test-secret"
UNIT_API_URL = "http://api.test"

CATALOG = [
    {"id": "item-1", "name": "Laptop", "category": "electronics"},
    {"id": "item-2", "name": "Novel", "category": "books"},
    {"id": "item-3", "name": "Headphones", "category": "electronics"},
]


class StubTargetApi:
    """
    Minimal in-process implementation of the target API.

    Routes:
        GET  /health, GET /items[?category=]
        GET  /profile, PUT /profile, POST /orders (bearer auth)
        any  /echo (returns method, headers and body)

    Every received request is recorded in `requests`.
    """

    def __init__(self, token_service: TokenService) -> None:
        self.token_service = token_service
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)
        self._orders = 0

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if path == "/health" and method == "GET":
            return httpx.Response(200, json={"status": "ok", "version": "1.0.0"})

        if path == "/items" and method == "GET":
            category = request.url.params.get("category")
            items = [i for i in CATALOG if category is None or i["category"] == category]
            return httpx.Response(200, json=items)

        if path == "/echo":
            return httpx.Response(200, json={
                "method": method,
                "headers": dict(request.headers),
                "body": request.content.decode() or None,
            })

        if path == "/text":
            return httpx.Response(200, text="plain body")

        if path in ("/profile", "/orders"):
            claims = self._authenticate(request)
            if claims is None:
                return httpx.Response(401, json={"error": "Unauthorized"})
            return self._protected(method, path, claims, self._json(request))

        return httpx.Response(404, json={"error": "Not found"})

    def _authenticate(self, request: httpx.Request) -> Optional[Dict[str, Any]]:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.token_service.verify_token(header[len("Bearer "):])

    def _protected(
        self,
        method: str,
        path: str,
        claims: Dict[str, Any],
        body: Any,
    ) -> httpx.Response:
        profile = {"id": claims["userId"], "email": claims["email"]}

        if path == "/profile" and method == "GET":
            return httpx.Response(200, json=profile)
        if path == "/profile" and method == "PUT":
            return httpx.Response(200, json={**profile, **(body or {})})
        if path == "/orders" and method == "POST":
            items = (body or {}).get("items")
            if not items:
                return httpx.Response(400, json={"error": "Order must contain at least one item"})
            self._orders += 1
            return httpx.Response(201, json={
                "id": f"order-{self._orders}",
                "userId": claims["userId"],
                "items": items,
                "shippingAddress": body.get("shippingAddress"),
            })
        return httpx.Response(405, json={"error": "Method not allowed"})

    @staticmethod
    def _json(request: httpx.Request) -> Any:
        if not request.content:
            return None
        return json.loads(request.content)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url=UNIT_API_URL, api_version="v1", jwt_secret=UNIT_SECRET)


@pytest.fixture
def token_service(settings: Settings) -> TokenService:
    return TokenService(settings)


@pytest.fixture
def target_api(token_service: TokenService) -> StubTargetApi:
    return StubTargetApi(token_service)


@pytest.fixture
def order_data() -> Dict[str, Any]:
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
