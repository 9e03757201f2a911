# src/session_client/transport.py

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx

from .credential_store import CredentialStore

lib_logger = logging.getLogger("session_client")

AUTHORIZATION_HEADER = "Authorization"


@dataclass(frozen=True)
class ApiRequest:
    """
    An outbound API call, treated as an immutable value.

    ``headers`` is a read-only mapping. Adding a header or setting the retry
    marker returns a new ApiRequest, so a caller's request can be replayed
    without ever being modified.

    Attributes:
        method: HTTP method
        url: Absolute URL or path relative to the transport's base URL
        headers: Extra request headers
        params: Query parameters
        json: JSON body
        content: Raw body, used when ``json`` is None
        retried: True once the request has been replayed after a credential
            refresh; such a request is never refreshed for again
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, Any]] = None
    json: Any = None
    content: Optional[bytes] = None
    retried: bool = False

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def has_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(key.lower() == lowered for key in self.headers)

    def with_header(self, name: str, value: str) -> "ApiRequest":
        """Return a copy with ``name`` set to ``value`` (case-insensitive replace)."""
        lowered = name.lower()
        headers = {k: v for k, v in self.headers.items() if k.lower() != lowered}
        headers[name] = value
        return replace(self, headers=headers)

    def mark_retried(self) -> "ApiRequest":
        return replace(self, retried=True)


class Transport:
    """
    Sends ApiRequests over an httpx.AsyncClient.

    The current access token from the credential store is attached as a
    bearer Authorization header, unless the request already carries one.
    The status of the response is not interpreted here.
    """

    def __init__(self, http_client: httpx.AsyncClient, store: CredentialStore):
        self._http = http_client
        self._store = store

    def _authorize(self, request: ApiRequest) -> ApiRequest:
        if request.has_header(AUTHORIZATION_HEADER):
            return request
        pair = self._store.get()
        if pair is None:
            return request
        return request.with_header(AUTHORIZATION_HEADER, f"Bearer {pair.access_token}")

    def build(self, request: ApiRequest) -> httpx.Request:
        """Build the httpx request that ``send`` would issue for ``request``."""
        request = self._authorize(request)
        return self._http.build_request(
            request.method,
            request.url,
            headers=dict(request.headers),
            params=request.params,
            json=request.json,
            content=request.content if request.json is None else None,
        )

    async def send(self, request: ApiRequest) -> httpx.Response:
        """
        Issue ``request`` and return the response, whatever its status.

        Raises:
            httpx.TransportError: On network failure or timeout
        """
        http_request = self.build(request)
        lib_logger.debug(
            f"{http_request.method} {http_request.url}"
            f"{' (replay)' if request.retried else ''}"
        )
        response = await self._http.send(http_request)
        lib_logger.debug(
            f"{http_request.method} {http_request.url} -> {response.status_code}"
        )
        return response
