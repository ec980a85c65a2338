"""Pytest configuration"""

import asyncio
import inspect

import httpx
import pytest

ENV_VARS = (
    "HTTP_PROXY",
    "http_proxy",
    "HTTPS_PROXY",
    "https_proxy",
    "NO_PROXY",
    "no_proxy",
    "TEENY_REQUEST_WARN_CONCURRENT_REQUESTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep proxy and threshold variables from the host out of the tests"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeTransport:
    """Records every fetch and answers through ``handler(uri, options)``."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self.closed = False

    async def fetch(self, uri, options):
        self.calls.append((uri, options))
        result = self.handler(uri, options)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def aclose(self):
        self.closed = True


@pytest.fixture
def make_response():
    def factory(status_code=200, headers=None, content=b"", uri="https://example.com", streamed=False):
        request = httpx.Request("GET", uri)
        if streamed:
            chunks = content if isinstance(content, list) else [content]

            async def body():
                for chunk in chunks:
                    yield chunk

            return httpx.Response(status_code, headers=headers, content=body(), request=request)
        return httpx.Response(status_code, headers=headers, content=content, request=request)

    return factory


@pytest.fixture
def fake_transport():
    def factory(handler):
        return FakeTransport(handler)

    return factory


@pytest.fixture
def callback_result():
    """Returns (callback, future) where the future resolves to the callback's arguments."""

    def factory():
        future = asyncio.get_running_loop().create_future()

        def callback(error, response, body):
            future.set_result((error, response, body))

        return callback, future

    return factory
