"""
Pytest configuration and fixtures for the Livia test suite.
"""

import pytest
import pytest_asyncio
import httpx
from typing import Callable

from livia.services.chat.credential_cache import CredentialCache
from livia.services.chat_service import ChatSession
from tests.stubs import CHAT_ENDPOINT, SYSTEM_PROMPT, RecordingTransport, StubCredentialProvider


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer env vars from leaking into config and providers."""
    for name in ("LIVIA_PASSPHRASE", "LIVIA_API_KEY", "LIVIA_CHAT_ENDPOINT",
                 "LIVIA_GRAPHQL_ENDPOINT", "LIVIA_MODEL", "LIVIA_CREDENTIAL_TYPE", "LOG_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def credential_provider() -> StubCredentialProvider:
    return StubCredentialProvider()


@pytest_asyncio.fixture
async def make_session(credential_provider: StubCredentialProvider):
    """
    Factory: make_session(handler, **session_kwargs) -> (session, transport).

    `handler` serves the chat endpoint; every request is recorded on the
    returned transport.
    """
    clients = []

    def factory(handler: Callable[[httpx.Request], httpx.Response], provider=None, **kwargs):
        transport = RecordingTransport(handler)
        client = httpx.AsyncClient(transport=transport)
        clients.append(client)
        credentials = CredentialCache(provider or credential_provider)
        options = {
            "endpoint": CHAT_ENDPOINT,
            "model": "gpt-4o",
            "temperature": 0.65,
            "system_prompt": SYSTEM_PROMPT,
        }
        options.update(kwargs)
        session = ChatSession(client=client, credentials=credentials, **options)
        return session, transport

    yield factory

    for client in clients:
        await client.aclose()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "streaming: mark test as streaming test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as HTTP API test"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "streaming" in str(item.fspath):
            item.add_marker(pytest.mark.streaming)
        if "/api/" in str(item.fspath):
            item.add_marker(pytest.mark.api)
