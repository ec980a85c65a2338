"""
Connection agent resolution.

An agent describes a dedicated connection pool (keep-alive or proxied) for a
request. Returning no agent lets the transport use its default pool.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

import httpx

from .configs import ProxySettings
from .models import PoolOptions, RequestOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class Agent:
    key: str
    secure: bool
    pool: PoolOptions = field(default_factory=PoolOptions)

    def client_kwargs(self) -> dict[str, Any]:
        return {"limits": self.pool.to_httpx_limits()}

    def build_client(self, transport: httpx.AsyncBaseTransport | None = None, **kwargs: Any) -> httpx.AsyncClient:
        client_kwargs = self.client_kwargs()
        if transport is not None:
            # A supplied transport performs all I/O, so proxy mounts would bypass it.
            client_kwargs.pop("proxy", None)
            client_kwargs["transport"] = transport
        return httpx.AsyncClient(trust_env=False, **client_kwargs, **kwargs)


@dataclass(frozen=True, kw_only=True)
class KeepAliveAgent(Agent):
    pass


@dataclass(frozen=True, kw_only=True)
class ProxyAgent(Agent):
    proxy: httpx.URL

    def client_kwargs(self) -> dict[str, Any]:
        return {**super().client_kwargs(), "proxy": httpx.Proxy(self.proxy)}


def should_use_proxy_for_uri(uri: str, no_proxy: list[str]) -> bool:
    """
    Check a target against no_proxy entries.

    An entry matches the target's origin or hostname exactly; entries
    starting with "." or "*." match any hostname ending with that suffix.
    """
    if not no_proxy:
        return True

    parsed = urlsplit(uri)
    hostname = parsed.hostname or ""
    origin = f"{parsed.scheme}://{parsed.netloc}"

    for entry in no_proxy:
        if not entry:
            continue
        if entry == origin or entry == hostname:
            return False
        if entry.startswith("*.") or entry.startswith("."):
            suffix = entry[1:] if entry.startswith("*.") else entry
            if hostname.endswith(suffix):
                return False
    return True


class AgentPool:
    """
    Cache of agents keyed by scheme, proxy target, keep-alive flag and pool
    tuning. Racing first uses may build equivalent agents; the stored one wins.
    """

    def __init__(self) -> None:
        self._agents: dict[str, Agent] = {}

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, key: str) -> bool:
        return key in self._agents

    def clear(self) -> None:
        self._agents.clear()

    def get_agent(self, uri: str, req_opts: RequestOptions) -> Agent | None:
        secure = not uri.startswith("http://")
        key = "https" if secure else "http"
        pool = req_opts.pool or PoolOptions()

        settings = ProxySettings()
        proxy = req_opts.proxy or settings.proxy
        # An explicit per-call proxy ignores no_proxy.
        if proxy and not req_opts.proxy and not should_use_proxy_for_uri(uri, settings.no_proxy_list):
            proxy = None

        if proxy:
            key += f":proxy:{proxy}"
            signature = pool.signature()
            if signature:
                key += f":pool:{signature}"
            if key not in self._agents:
                logger.debug(f"Creating proxy agent {key}")
                agent: Agent = ProxyAgent(key=key, secure=secure, pool=pool, proxy=httpx.URL(proxy))
                return self._agents.setdefault(key, agent)
        elif req_opts.forever:
            key += ":forever"
            signature = pool.signature()
            if signature:
                key += f":pool:{signature}"
            if key not in self._agents:
                logger.debug(f"Creating keep-alive agent {key}")
                agent = KeepAliveAgent(key=key, secure=secure, pool=pool)
                return self._agents.setdefault(key, agent)
        else:
            return None

        return self._agents[key]
