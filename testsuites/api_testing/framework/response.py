"""
================================================================================
Response Model
================================================================================

Immutable response value shared by the request agents and the API client.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import httpx
from loguru import logger


JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ApiResponse:
    """
    Result of one HTTP exchange.

    Attributes:
        status: HTTP status code
        headers: Read-only response headers (lower-cased names)
        body: Parsed JSON when the content type is JSON, else raw text
    """

    status: int
    headers: Mapping[str, str]
    body: Any

    @property
    def data(self) -> Any:
        """Alias of body, the field name used by ApiClient callers."""
        return self.body

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "ApiResponse":
        content_type = response.headers.get("content-type", "")
        if JSON_CONTENT_TYPE in content_type and response.content:
            try:
                body = response.json()
            except ValueError as e:
                request = response.request
                logger.error(
                    f"Malformed JSON in response to {request.method} {request.url} "
                    f"(status {response.status_code}): {e}"
                )
                raise
        else:
            body = response.text

        headers = MappingProxyType(
            {key.lower(): value for key, value in response.headers.items()}
        )
        return cls(status=response.status_code, headers=headers, body=body)


__all__ = ["ApiResponse"]
