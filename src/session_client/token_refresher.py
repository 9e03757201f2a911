# src/session_client/token_refresher.py

import logging
from typing import Optional

import httpx

from .credential_store import CredentialPair
from .errors import RefreshFailedError, describe_http_error, mask_credential
from .timeout_config import TimeoutConfig

lib_logger = logging.getLogger("session_client")


class TokenRefresher:
    """
    Client for the backend's refresh endpoint.

    POSTs ``{"refreshToken": ...}`` and expects ``{"token": ...,
    "refreshToken": ...}`` back; the refresh token rotates on every call.
    Uses its own plain httpx client so a refresh never goes through the
    authenticated dispatch path.
    """

    def __init__(
        self,
        refresh_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[httpx.Timeout] = None,
    ):
        self.refresh_url = refresh_url
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout or TimeoutConfig.request(),
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __call__(self, refresh_token: str) -> CredentialPair:
        return await self.refresh(refresh_token)

    async def refresh(self, refresh_token: str) -> CredentialPair:
        """
        Exchange ``refresh_token`` for a new credential pair.

        Raises:
            RefreshFailedError: On any non-2xx status, network error, timeout
                or a response body without both tokens
        """
        lib_logger.debug(
            f"Requesting new credentials with refresh token {mask_credential(refresh_token)}"
        )
        try:
            response = await self._http.post(
                self.refresh_url, json={"refreshToken": refresh_token}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            try:
                body = e.response.json()
            except ValueError:
                body = None
            lib_logger.error(
                f"Refresh endpoint returned HTTP {status_code}: {e.response.text[:200]}"
            )
            raise RefreshFailedError(
                describe_http_error(status_code, body), status_code=status_code
            ) from e
        except httpx.TransportError as e:
            lib_logger.error(f"Refresh request failed: {type(e).__name__}: {e}")
            raise RefreshFailedError(
                "Network error. Please check your connection and try again."
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise RefreshFailedError(
                "Refresh endpoint returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        pair = None
        if isinstance(data, dict):
            access_token = data.get("token")
            new_refresh_token = data.get("refreshToken")
            if isinstance(access_token, str) and isinstance(new_refresh_token, str):
                if access_token and new_refresh_token:
                    pair = CredentialPair(access_token, new_refresh_token)

        if pair is None:
            raise RefreshFailedError(
                "Refresh response did not contain both 'token' and 'refreshToken'",
                status_code=response.status_code,
            )
        return pair
