import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from .agents import Agent
from .models import FetchOptions

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    async def fetch(self, uri: str, options: FetchOptions) -> httpx.Response:
        """Send the request and return the response with its body still unread."""
        ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """
    Fetch primitive backed by httpx.

    Requests without an agent share one default client. Each distinct agent
    gets its own client, built from the agent's proxy and pool settings.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        default_timeout: float | None = None,
    ):
        self._transport = transport
        self._default_timeout = default_timeout
        self._clients: dict[str, httpx.AsyncClient] = {}

    def _get_client(self, agent: Agent | None) -> httpx.AsyncClient:
        key = agent.key if agent is not None else ""
        client = self._clients.get(key)
        if client is None:
            if agent is None:
                client = httpx.AsyncClient(
                    transport=self._transport,
                    timeout=self._default_timeout,
                    trust_env=False,
                )
            else:
                client = agent.build_client(transport=self._transport, timeout=self._default_timeout)
            client = self._clients.setdefault(key, client)
        return client

    async def close(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()

    aclose = close

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.close()

    def _prepare_headers(self, options: FetchOptions) -> dict[str, str]:
        headers = dict(options.headers)
        if options.compress is False and not any(k.lower() == "accept-encoding" for k in headers):
            headers["Accept-Encoding"] = "identity"
        return headers

    async def fetch(self, uri: str, options: FetchOptions) -> httpx.Response:
        client = self._get_client(options.agent)
        timeout = options.timeout / 1000 if options.timeout else httpx.USE_CLIENT_DEFAULT

        request = client.build_request(
            method=options.method,
            url=uri,
            headers=self._prepare_headers(options),
            content=options.body,
            timeout=timeout,
        )

        logger.debug(f"-> {request.method} {request.url}")
        response = await client.send(request, stream=True)
        logger.debug(f"<- {response.status_code} {request.url}")
        return response
