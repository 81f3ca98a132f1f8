"""
================================================================================
Request Factory and Authenticated Request Wrapper
================================================================================

Chainable request builders for assertion-style API tests.

A RequestAgent is bound either to a base URL (network mode, for a running
server) or to an in-process handle (an httpx transport or a WSGI app), so
the same test code runs against both:

    >>> request = create_request("http://localhost:3000")
    >>> response = request.get("/items").query({"category": "books"}).execute()

    >>> auth = create_authenticated_request("http://localhost:3000")
    >>> auth.request.post("/orders").send(order).execute().status
    201

The authenticated agent decorates a plain agent: every verb call carries a
pinned "Authorization: Bearer <token>" header that later .set() calls
cannot replace.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

import httpx
from loguru import logger

from .config_loader import Settings, load_settings
from .reporting import report_exchange
from .response import ApiResponse
from .token_service import TokenService, bearer


# Base URL used when the target is reached in-process
IN_PROCESS_BASE_URL = "http://testserver"

AUTHORIZATION = "Authorization"

Target = Union[str, httpx.BaseTransport, Callable[..., Any]]

_NO_BODY = object()


class RequestError(Exception):
    """Raised when a request agent cannot be built or a request is misused."""
    pass


class PendingRequest:
    """
    A request under construction.

    Chain steps return the same object; execute() performs the exchange.

    Usage:
        >>> request.put("/profile").set("X-Trace", "1").send({"name": "A"}).execute()
    """

    def __init__(self, agent: "RequestAgent", method: str, url: str) -> None:
        self._agent = agent
        self.method = method.upper()
        self.url = url
        self._headers: Dict[str, str] = {}
        self._pinned: set = set()
        self._params: Dict[str, Any] = {}
        self._body: Any = _NO_BODY

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self._params)

    @property
    def body(self) -> Any:
        return None if self._body is _NO_BODY else self._body

    def set(
        self,
        name: Union[str, Mapping[str, str]],
        value: Optional[str] = None,
    ) -> "PendingRequest":
        """
        Attach one header, or several from a mapping.

        Pinned headers are left untouched.
        """
        fields = name.items() if isinstance(name, Mapping) else [(name, value)]
        for key, val in fields:
            if key.lower() in self._pinned:
                logger.warning(f"Ignoring override of pinned header: {key}")
                continue
            self._put_header(key, str(val))
        return self

    def pin(self, name: str, value: str) -> "PendingRequest":
        """
        Attach a header that later set() or pin() calls cannot replace.

        The first pin of a name wins.
        """
        if name.lower() in self._pinned:
            logger.warning(f"Ignoring re-pin of pinned header: {name}")
            return self
        self._put_header(name, value)
        self._pinned.add(name.lower())
        return self

    def send(self, payload: Any) -> "PendingRequest":
        """
        Attach a request body.

        Dicts and lists are sent as JSON; successive dict payloads merge.
        Strings and bytes are sent as-is.
        """
        if isinstance(payload, dict) and isinstance(self._body, dict):
            self._body = {**self._body, **payload}
        else:
            self._body = payload
        return self

    def query(self, params: Mapping[str, Any]) -> "PendingRequest":
        """Add query string parameters."""
        self._params.update(params)
        return self

    def execute(self) -> ApiResponse:
        """Perform the HTTP exchange."""
        return self._agent.dispatch(self)

    def _put_header(self, name: str, value: str) -> None:
        for existing in [k for k in self._headers if k.lower() == name.lower()]:
            del self._headers[existing]
        self._headers[name] = value

    def __repr__(self) -> str:
        return f"<PendingRequest {self.method} {self.url}>"


class RequestIssuer(ABC):
    """
    Interface shared by plain and decorated request agents.

    Subclasses implement open(); the verb methods are derived from it.
    """

    VERBS = ("get", "post", "put", "patch", "delete", "head")

    @abstractmethod
    def open(self, method: str, url: str) -> PendingRequest:
        """Start a request for the given method and path."""

    def get(self, url: str) -> PendingRequest:
        return self.open("GET", url)

    def post(self, url: str) -> PendingRequest:
        return self.open("POST", url)

    def put(self, url: str) -> PendingRequest:
        return self.open("PUT", url)

    def patch(self, url: str) -> PendingRequest:
        return self.open("PATCH", url)

    def delete(self, url: str) -> PendingRequest:
        return self.open("DELETE", url)

    def head(self, url: str) -> PendingRequest:
        return self.open("HEAD", url)


class RequestAgent(RequestIssuer):
    """
    Request issuer bound to a base URL or an in-process handle.

    Each execute() opens a fresh httpx.Client, so agents hold no
    connection state and can be shared between tests.
    """

    def __init__(self, target: Target) -> None:
        self.transport: Optional[httpx.BaseTransport] = None

        if isinstance(target, str):
            if not target:
                raise RequestError("Base URL must not be empty")
            self.base_url = target.rstrip("/")
        elif isinstance(target, httpx.BaseTransport):
            self.base_url = IN_PROCESS_BASE_URL
            self.transport = target
        elif isinstance(target, httpx.AsyncBaseTransport):
            raise RequestError(
                "Async transports are not supported; pass a WSGI app or a sync transport"
            )
        elif callable(target):
            self.base_url = IN_PROCESS_BASE_URL
            self.transport = httpx.WSGITransport(app=target)
        else:
            raise RequestError(f"Unsupported request target: {target!r}")

    @property
    def in_process(self) -> bool:
        return self.transport is not None

    def open(self, method: str, url: str) -> PendingRequest:
        return PendingRequest(self, method, url)

    def dispatch(self, pending: PendingRequest) -> ApiResponse:
        """
        Send a pending request and wrap the result.

        Raises:
            httpx.TransportError: On connection, DNS or timeout failures
        """
        kwargs: Dict[str, Any] = {"headers": pending.headers}
        if pending.params:
            kwargs["params"] = pending.params

        body = pending.body
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        elif isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif body is not None:
            raise RequestError(f"Unsupported request body type: {type(body).__name__}")

        with httpx.Client(base_url=self.base_url, transport=self.transport) as client:
            try:
                response = client.request(pending.method, pending.url, **kwargs)
            except httpx.TransportError as e:
                logger.error(
                    f"Error making {pending.method} request to "
                    f"{self.base_url}{pending.url}: {e}"
                )
                raise

        result = ApiResponse.from_httpx(response)
        report_exchange(
            pending.method,
            str(response.request.url),
            pending.headers,
            body,
            result,
        )
        return result

    def __repr__(self) -> str:
        mode = "in-process" if self.in_process else "network"
        return f"<RequestAgent {self.base_url} ({mode})>"


class AuthenticatedRequestAgent(RequestIssuer):
    """
    Decorates a request issuer with a fixed bearer credential.

    The Authorization header is pinned when the verb is called, before
    the caller's chain runs, so it is always present and always wins.
    Any other attribute is delegated to the wrapped issuer.
    """

    def __init__(self, wrapped: RequestIssuer, token: str) -> None:
        self._wrapped = wrapped
        self._token = token

    @property
    def token(self) -> str:
        return self._token

    @property
    def wrapped(self) -> RequestIssuer:
        return self._wrapped

    def open(self, method: str, url: str) -> PendingRequest:
        return self._wrapped.open(method, url).pin(AUTHORIZATION, bearer(self._token))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in ("_wrapped", "_token"):
            raise AttributeError(name)
        return getattr(self._wrapped, name)

    def __repr__(self) -> str:
        return f"<AuthenticatedRequestAgent wrapping {self._wrapped!r}>"


@dataclass(frozen=True)
class AuthenticatedRequest:
    """Authenticated agent with the identity it acts as."""

    request: AuthenticatedRequestAgent
    user: Dict[str, Any]
    token: str


def create_request(
    target: Optional[Target] = None,
    settings: Optional[Settings] = None,
) -> RequestAgent:
    """
    Create a request agent.

    Args:
        target: Base URL, httpx transport or WSGI app. Defaults to
                settings.api_url.
        settings: Configuration used when no target is given
    """
    if target is None:
        target = (settings or load_settings()).api_url
    return RequestAgent(target)


def create_authenticated_request(
    target: Optional[Target] = None,
    options: Optional[Mapping[str, Any]] = None,
    settings: Optional[Settings] = None,
    token_service: Optional[TokenService] = None,
) -> AuthenticatedRequest:
    """
    Create a request agent that authenticates every call as a test user.

    Args:
        target: Base URL, httpx transport or WSGI app
        options: {"user": {...custom user fields}}
        settings: Configuration for the target default and token signing
        token_service: Issuer to mint the token with

    Returns:
        AuthenticatedRequest(request, user, token)
    """
    if settings is None and (target is None or token_service is None):
        settings = load_settings()
    if token_service is None:
        token_service = TokenService(settings)

    request = create_request(target, settings)
    identity = token_service.create_test_user((options or {}).get("user"))

    return AuthenticatedRequest(
        request=AuthenticatedRequestAgent(request, identity.token),
        user=identity.user,
        token=identity.token,
    )


__all__ = [
    "RequestIssuer",
    "RequestAgent",
    "AuthenticatedRequestAgent",
    "AuthenticatedRequest",
    "PendingRequest",
    "RequestError",
    "create_request",
    "create_authenticated_request",
    "IN_PROCESS_BASE_URL",
]
