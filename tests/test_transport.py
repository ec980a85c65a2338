import httpx
import pytest

from teeny_request.agents import KeepAliveAgent, ProxyAgent
from teeny_request.models import FetchOptions
from teeny_request.transport import HttpxTransport, Transport


def mock_transport(recorded):
    async def handler(request: httpx.Request) -> httpx.Response:
        await request.aread()
        recorded.append(request)
        return httpx.Response(200, headers={"content-type": "text/plain"}, content=b"pong")

    return httpx.MockTransport(handler)


class TestHttpxTransport:
    def test_satisfies_protocol(self):
        assert isinstance(HttpxTransport(), Transport)

    @pytest.mark.asyncio
    async def test_fetch(self):
        recorded = []
        async with HttpxTransport(transport=mock_transport(recorded)) as transport:
            response = await transport.fetch(
                "https://api.example.com/data",
                FetchOptions(method="POST", headers={"X-Api-Key": "secret"}, body='{"a": 1}'),
            )
            assert response.status_code == 200
            assert await response.aread() == b"pong"

        request = recorded[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.example.com/data"
        assert request.headers["X-Api-Key"] == "secret"
        assert request.content == b'{"a": 1}'

    @pytest.mark.asyncio
    async def test_streamed_request_body(self):
        recorded = []

        async def body():
            yield b"part1"
            yield b"part2"

        async with HttpxTransport(transport=mock_transport(recorded)) as transport:
            await transport.fetch("https://example.com", FetchOptions(method="PUT", body=body()))
        assert recorded[0].content == b"part1part2"

    @pytest.mark.asyncio
    async def test_response_not_read(self):
        async def handler(request):
            async def chunks():
                yield b"lazy"

            return httpx.Response(200, content=chunks())

        async with HttpxTransport(transport=httpx.MockTransport(handler)) as transport:
            response = await transport.fetch("https://example.com", FetchOptions())
            assert not response.is_stream_consumed
            assert [chunk async for chunk in response.aiter_raw()] == [b"lazy"]

    @pytest.mark.asyncio
    async def test_compress_disabled(self):
        recorded = []
        async with HttpxTransport(transport=mock_transport(recorded)) as transport:
            await transport.fetch("https://example.com", FetchOptions(compress=False))
            await transport.fetch(
                "https://example.com",
                FetchOptions(compress=False, headers={"accept-encoding": "br"}),
            )
            await transport.fetch("https://example.com", FetchOptions())
        assert recorded[0].headers["accept-encoding"] == "identity"
        assert recorded[1].headers["accept-encoding"] == "br"
        assert recorded[2].headers["accept-encoding"] != "identity"

    @pytest.mark.asyncio
    async def test_timeout_hint(self):
        recorded = []
        async with HttpxTransport(transport=mock_transport(recorded)) as transport:
            await transport.fetch("https://example.com", FetchOptions(timeout=1500))
        assert recorded[0].extensions["timeout"]["read"] == 1.5

    @pytest.mark.asyncio
    async def test_default_client_reused(self):
        transport = HttpxTransport(transport=mock_transport([]))
        assert transport._get_client(None) is transport._get_client(None)
        await transport.close()
        assert transport._clients == {}

    @pytest.mark.asyncio
    async def test_agent_clients_use_supplied_transport(self):
        recorded = []
        agents = [
            KeepAliveAgent(key="https:forever", secure=True),
            ProxyAgent(key="https:proxy:http://p:1", secure=True, proxy=httpx.URL("http://p:1")),
        ]
        async with HttpxTransport(transport=mock_transport(recorded)) as transport:
            for agent in agents:
                response = await transport.fetch("https://example.com", FetchOptions(agent=agent))
                assert await response.aread() == b"pong"
        assert len(recorded) == 2

    @pytest.mark.asyncio
    async def test_client_per_agent(self):
        transport = HttpxTransport()
        agent = KeepAliveAgent(key="https:forever", secure=True)
        client = transport._get_client(agent)
        assert client is transport._get_client(agent)
        assert client is not transport._get_client(None)
        await transport.close()
        assert client.is_closed
