"""
Pytest configuration and fixtures for the test suite.
"""
import os
import sys
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from session_client.credential_store import CredentialPair, CredentialStore
from session_client.config import ClientConfig
from tests.fixtures.backend_mocks import FakeBackend


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "asyncio: mark test as an async test")


@pytest.fixture
def expired_pair():
    """Credentials whose access token the backend no longer accepts."""
    return CredentialPair(access_token="T1", refresh_token="R1")


@pytest.fixture
def memory_store(expired_pair):
    """In-memory credential store holding the expired pair."""
    store = CredentialStore()
    store.set(expired_pair)
    return store


@pytest.fixture
def session_listener():
    return MagicMock(name="session_listener")


@pytest.fixture
def backend():
    """Fake admin backend: T1/R1 issued, T1 already expired."""
    return FakeBackend(refresh_token="R1", new_tokens=[("T2", "R2"), ("T3", "R3")])


@pytest.fixture
def client_config():
    return ClientConfig(
        base_url=FakeBackend.BASE_URL,
        credentials_file=None,
        refresh_timeout=2.0,
    )


@pytest_asyncio.fixture
async def backend_http(backend):
    """httpx client routed to the fake backend."""
    client = httpx.AsyncClient(
        base_url=FakeBackend.BASE_URL, transport=httpx.MockTransport(backend.handler)
    )
    yield client
    await client.aclose()
