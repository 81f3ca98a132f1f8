"""
================================================================================
Response Assertions
================================================================================

Named status checks for ApiResponse values. Each helper raises
AssertionError with the status and body on mismatch and returns the
response for chaining:

    >>> assertions.created(auth.request.post("/orders").send(order).execute())

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any

import allure

from .response import ApiResponse


_ANY = object()


def expect_status(response: ApiResponse, status: int) -> ApiResponse:
    """Assert the response status and return the response."""
    with allure.step(f"Verify status code is {status}"):
        assert response.status == status, (
            f"Expected {status}, got {response.status}. Body: {response.body!r}"
        )
    return response


def success(response: ApiResponse) -> ApiResponse:
    return expect_status(response, 200)


def created(response: ApiResponse) -> ApiResponse:
    return expect_status(response, 201)


def unauthorized(response: ApiResponse) -> ApiResponse:
    return expect_status(response, 401)


def forbidden(response: ApiResponse) -> ApiResponse:
    return expect_status(response, 403)


def not_found(response: ApiResponse) -> ApiResponse:
    return expect_status(response, 404)


def has_property(response: ApiResponse, key: str, value: Any = _ANY) -> ApiResponse:
    """
    Assert that a JSON object body has a key, optionally with a value.
    """
    body = response.body
    assert isinstance(body, dict), f"Expected a JSON object body, got {body!r}"
    assert key in body, f"Response should contain {key!r}. Body: {body!r}"
    if value is not _ANY:
        assert body[key] == value, (
            f"Expected {key}={value!r}, got {body[key]!r}"
        )
    return response


__all__ = [
    "expect_status",
    "success",
    "created",
    "unauthorized",
    "forbidden",
    "not_found",
    "has_property",
]
