# src/session_client/client.py

import logging
from typing import Any, FrozenSet, Mapping, Optional

import httpx

from .config import ClientConfig
from .credential_store import CredentialStore
from .errors import CredentialExpiredError
from .refresh_coordinator import RefreshCoordinator, RefreshFunc
from .replayer import RequestReplayer
from .session import SessionInvalidator, SessionListener
from .token_refresher import TokenRefresher
from .transport import ApiRequest, Transport

lib_logger = logging.getLogger("session_client")

DEFAULT_HEADERS = {"Content-Type": "application/json"}


class AuthenticatedClient:
    """
    Async HTTP client for the admin backend that keeps the session alive.

    Every request carries the stored access token. A response with an
    expired-credential status is handed to the RefreshCoordinator, which
    refreshes the credential pair once for all concurrently failing requests
    and replays them. If the refresh fails, the session is invalidated, the
    ``on_session_expired`` listener is called and every affected request
    raises RefreshFailedError.

    Other error statuses raise httpx.HTTPStatusError; network failures raise
    httpx.TransportError.

    Usage:
        async with AuthenticatedClient(config, on_session_expired=show_login) as api:
            users = (await api.get("/users")).json()
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[CredentialStore] = None,
        on_session_expired: Optional[SessionListener] = None,
        refresh_func: Optional[RefreshFunc] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            config: Client settings; defaults to ClientConfig()
            store: Credential store; defaults to one persisted at
                config.credentials_file (in memory if that is None)
            on_session_expired: Called once when a refresh fails terminally
            refresh_func: Replaces the refresh endpoint call, mainly for tests
            http_client: Client used for API calls; its base_url and headers
                are left as given
        """
        self.config = config or ClientConfig()
        self.store = store or CredentialStore.from_env(self.config.credentials_file)
        self.expired_statuses: FrozenSet[int] = self.config.expired_statuses

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=DEFAULT_HEADERS,
            timeout=self.config.timeout,
        )

        self._refresher: Optional[TokenRefresher] = None
        if refresh_func is None:
            self._refresher = TokenRefresher(
                self.config.refresh_url, timeout=self.config.timeout
            )
            refresh_func = self._refresher

        self.transport = Transport(self._http, self.store)
        self.invalidator = SessionInvalidator(self.store, on_session_expired)
        self.coordinator = RefreshCoordinator(
            store=self.store,
            refresh_func=refresh_func,
            replayer=RequestReplayer(self.dispatch),
            invalidator=self.invalidator,
            refresh_timeout=self.config.refresh_timeout,
        )

    async def __aenter__(self) -> "AuthenticatedClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.coordinator.aclose()
        if self._refresher is not None:
            await self._refresher.aclose()
        if self._owns_http:
            await self._http.aclose()

    def is_authenticated(self) -> bool:
        return self.store.get() is not None

    def logout(self) -> None:
        """Forget the stored credentials. The session listener is not notified."""
        self.store.clear()
        lib_logger.info("Logged out; stored credentials cleared")

    def is_credential_expired(self, response: httpx.Response) -> bool:
        return response.status_code in self.expired_statuses

    async def dispatch(self, request: ApiRequest) -> httpx.Response:
        """
        Send ``request`` and classify the response.

        Returns:
            The successful (or replayed) response

        Raises:
            CredentialExpiredError: On double expiry of a replayed request
            RefreshFailedError: If recovering from an expired credential failed
            httpx.HTTPStatusError: For any other error status
            httpx.TransportError: On network failure
        """
        response = await self.transport.send(request)

        if self.is_credential_expired(response):
            failure = CredentialExpiredError(response.request, response)
            return await self.coordinator.handle_expired_credential(request, failure)

        response.raise_for_status()
        return response

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        return await self.dispatch(
            ApiRequest(
                method=method,
                url=url,
                headers=headers or {},
                params=params,
                json=json,
                content=content,
            )
        )

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)
