"""
================================================================================
Allure Exchange Reporting
================================================================================

Records every HTTP exchange issued by the harness as an Allure step:
    - Request URL with query parameters
    - Redacted request headers and body
    - cURL command for reproduction
    - Response status and (truncated) body

Sensitive headers and body fields are masked before anything is attached
or logged.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

import allure
from allure_commons.types import AttachmentType
from loguru import logger

from .response import ApiResponse


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

MASK = "***MASKED***"

SENSITIVE_HEADERS = {"authorization", "x-api-key", "x-app-auth", "cookie", "set-cookie"}
SENSITIVE_FIELDS = ("password", "secret", "token", "api_key", "authorization", "session")


def redact_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Mask sensitive header values before logging.
    """
    masked = {}
    for key, value in (headers or {}).items():
        if key.lower() in SENSITIVE_HEADERS:
            masked[key] = MASK
        else:
            masked[key] = value
    return masked


def redact_body(payload: Any) -> Any:
    """
    Recursively mask sensitive fields in request bodies.
    """
    if isinstance(payload, dict):
        redacted = {}
        for key, value in payload.items():
            if any(token in str(key).lower() for token in SENSITIVE_FIELDS):
                redacted[key] = MASK
            else:
                redacted[key] = redact_body(value)
        return redacted
    if isinstance(payload, list):
        return [redact_body(item) for item in payload]
    return payload


def build_curl(
    method: str,
    url: str,
    headers: Mapping[str, Any],
    body: Any = None,
) -> str:
    """
    Build cURL command for request reproduction.

    Headers are expected to be redacted already.
    """
    parts = [f"curl -X {method}"]

    for key, value in headers.items():
        parts.append(f"-H '{key}: {value}'")

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if body is not None:
        body_json = body if isinstance(body, str) else json.dumps(body, ensure_ascii=False)
        parts.append(f"-d '{body_json}'")

    parts.append(f"'{url}'")

    return " \\\n  ".join(parts)


def _format_body(body: Any) -> str:
    if isinstance(body, (dict, list)):
        content = json.dumps(body, ensure_ascii=False, indent=2)
    else:
        content = str(body) if body not in (None, "") else "<empty>"

    if len(content) > MAX_RESPONSE_LENGTH:
        content = (
            f"{content[:MAX_RESPONSE_LENGTH]}\n\n"
            f"... [Truncated, full length: {len(content)} chars] ..."
        )
    return content


def report_exchange(
    method: str,
    url: str,
    headers: Optional[Mapping[str, Any]],
    body: Any,
    response: ApiResponse,
) -> None:
    """
    Log an HTTP request/response pair to loguru and the Allure report.

    Args:
        method: HTTP method
        url: Full request URL including query string
        headers: Outgoing request headers (redacted here)
        body: Outgoing JSON-compatible body or raw string
        response: The received response
    """
    safe_headers = redact_headers(headers)
    safe_body = redact_body(body)

    status_mark = "OK" if response.status < 400 else "FAIL"
    step_title = f"[{status_mark}] {method} {url} -> {response.status}"
    logger.debug(step_title)

    with allure.step(step_title):
        allure.attach(url, name="Request URL", attachment_type=AttachmentType.TEXT)

        if safe_headers:
            allure.attach(
                json.dumps(safe_headers, ensure_ascii=False, indent=2),
                name="Request Headers",
                attachment_type=AttachmentType.JSON,
            )

        if safe_body is not None:
            allure.attach(
                _format_body(safe_body),
                name="Request Body",
                attachment_type=AttachmentType.JSON,
            )

        allure.attach(
            build_curl(method, url, safe_headers, safe_body),
            name="cURL Command",
            attachment_type=AttachmentType.TEXT,
        )

        allure.attach(
            str(response.status),
            name="Response Status",
            attachment_type=AttachmentType.TEXT,
        )

        allure.attach(
            _format_body(response.body),
            name="Response Body",
            attachment_type=AttachmentType.JSON
            if isinstance(response.body, (dict, list))
            else AttachmentType.TEXT,
        )


__all__ = [
    "report_exchange",
    "redact_headers",
    "redact_body",
    "build_curl",
    "MAX_RESPONSE_LENGTH",
]
