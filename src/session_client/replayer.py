# src/session_client/replayer.py

from typing import Awaitable, Callable

import httpx

from .credential_store import CredentialPair
from .transport import AUTHORIZATION_HEADER, ApiRequest

Dispatch = Callable[[ApiRequest], Awaitable[httpx.Response]]


class RequestReplayer:
    """
    Reissues a request with a freshly obtained access token.

    ``dispatch`` is the authenticated send path, so the replay's outcome,
    including a second credential-expired failure, reaches the waiting caller
    exactly as dispatch produced it.
    """

    def __init__(self, dispatch: Dispatch):
        self._dispatch = dispatch

    async def replay(self, request: ApiRequest, pair: CredentialPair) -> httpx.Response:
        replayed = request.with_header(
            AUTHORIZATION_HEADER, f"Bearer {pair.access_token}"
        )
        return await self._dispatch(replayed)
