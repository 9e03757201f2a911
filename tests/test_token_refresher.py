"""
Token Refresher Tests

The refresh endpoint contract: request body, rotated pair, error mapping.
"""

import json

import httpx
import pytest

from session_client.credential_store import CredentialPair
from session_client.errors import RefreshFailedError
from session_client.token_refresher import TokenRefresher

REFRESH_URL = "http://backend.test/api/auth/refresh-token"


def refresher_for(handler) -> TokenRefresher:
    return TokenRefresher(
        REFRESH_URL, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


class TestRefresh:
    @pytest.mark.asyncio
    async def test_posts_refresh_token_and_returns_rotated_pair(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"token": "T2", "refreshToken": "R2"})

        pair = await refresher_for(handler)("R1")

        assert pair == CredentialPair("T2", "R2")
        assert seen == {"method": "POST", "url": REFRESH_URL, "body": {"refreshToken": "R1"}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,body,message",
        [
            (401, {"message": "Refresh token expired"}, "Refresh token expired"),
            (403, {}, "Access denied. Your account may be disabled."),
            (500, {"message": "NullPointerException"}, "Server error. Please try again later."),
            (418, None, "An unexpected error occurred."),
        ],
    )
    async def test_error_status_is_refresh_failure(self, status, body, message):
        def handler(request):
            if body is None:
                return httpx.Response(status, text="teapot")
            return httpx.Response(status, json=body)

        with pytest.raises(RefreshFailedError) as exc_info:
            await refresher_for(handler).refresh("R1")

        assert exc_info.value.status_code == status
        assert exc_info.value.message == message

    @pytest.mark.asyncio
    async def test_network_error_is_refresh_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(RefreshFailedError) as exc_info:
            await refresher_for(handler).refresh("R1")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{"token": "T2"}, {"refreshToken": "R2"}, {"token": "", "refreshToken": "R2"}, ["T2"]],
    )
    async def test_incomplete_body_is_refresh_failure(self, payload):
        def handler(request):
            return httpx.Response(200, json=payload)

        with pytest.raises(RefreshFailedError, match="both"):
            await refresher_for(handler).refresh("R1")

    @pytest.mark.asyncio
    async def test_non_json_body_is_refresh_failure(self):
        def handler(request):
            return httpx.Response(200, text="<html>login</html>")

        with pytest.raises(RefreshFailedError, match="non-JSON"):
            await refresher_for(handler).refresh("R1")
