import asyncio
from collections.abc import Callable, Coroutine, Mapping
from typing import Any

import httpx

from .agents import AgentPool
from .exceptions import MultipartUnsupportedError, TeenyRequestError, TransportError
from .models import FetchOptions, LegacyResponse, RequestOptions
from .multipart import create_multipart_stream, generate_boundary, multipart_content_type
from .options import OptionsLike, as_mapping, merge_options, request_to_fetch_options
from .response import decode_response_body, fetch_to_request_response
from .statistics import TeenyStatistics
from .stream import ResponseStream
from .transport import HttpxTransport, Transport

Callback = Callable[[BaseException | None, LegacyResponse | None, Any], Any]


class TeenyRequest:
    """
    Request-style calls on top of a fetch transport.

    ``client(options, callback)`` schedules the request and later invokes
    ``callback(error, response, body)``. ``client(options)`` returns a
    :class:`ResponseStream` right away. Both must be called from within a
    running event loop.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        agent_pool: AgentPool | None = None,
        statistics: TeenyStatistics | None = None,
        defaults: Mapping[str, Any] | None = None,
    ):
        self._transport = transport if transport is not None else HttpxTransport()
        self._agent_pool = agent_pool if agent_pool is not None else AgentPool()
        self._stats = statistics if statistics is not None else TeenyStatistics()
        self._defaults: dict[str, Any] = dict(defaults or {})
        self._tasks: set[asyncio.Task] = set()

    @property
    def stats(self) -> TeenyStatistics:
        return self._stats

    def get_stats(self) -> TeenyStatistics:
        return self._stats

    def reset_stats(self) -> None:
        self._stats.reset()

    def defaults(self, defaults: OptionsLike) -> "TeenyRequest":
        """Return a client that applies ``defaults`` under every call's options."""
        bound = TeenyRequest(
            transport=self._transport,
            agent_pool=self._agent_pool,
            statistics=self._stats,
            defaults=merge_options(self._defaults, as_mapping(defaults)),
        )
        bound._tasks = self._tasks
        return bound

    def build_options(self, options: OptionsLike) -> RequestOptions:
        if not self._defaults:
            return RequestOptions.parse(options)
        return RequestOptions.parse(merge_options(self._defaults, as_mapping(options)))

    async def close(self) -> None:
        """Let in-flight dispatches settle, then release the transport."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._transport.aclose()

    aclose = close

    async def __aenter__(self) -> "TeenyRequest":
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------
    def __call__(self, options: OptionsLike, callback: Callback | None = None) -> ResponseStream | None:
        uri, fetch_options, is_multipart = self._prepare(options)

        if is_multipart and callback is None:
            raise MultipartUnsupportedError()

        if callback is None:
            stream = ResponseStream()
            self._spawn(self._dispatch_stream(uri, fetch_options.with_compress(False), stream))
            return stream

        self._spawn(self._dispatch_callback(uri, fetch_options, callback))
        return None

    async def request(self, options: OptionsLike) -> tuple[LegacyResponse, Any]:
        """Awaitable form of a callback call; errors are raised instead."""
        uri, fetch_options, _ = self._prepare(options)
        return await self._send(uri, fetch_options)

    def _prepare(self, options: OptionsLike) -> tuple[str, FetchOptions, bool]:
        req_opts = self.build_options(options)
        uri, fetch_options = request_to_fetch_options(req_opts, self._agent_pool)

        if req_opts.multipart is not None and len(req_opts.multipart) == 2:
            boundary = generate_boundary()
            fetch_options = fetch_options.with_headers(
                {"Content-Type": multipart_content_type(boundary)}
            ).with_body(create_multipart_stream(boundary, req_opts.multipart))
            return uri, fetch_options, True
        return uri, fetch_options, False

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, uri: str, options: FetchOptions) -> httpx.Response:
        self._stats.request_starting()
        try:
            return await self._transport.fetch(uri, options)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            raise TransportError.from_exception(exc) from exc
        finally:
            self._stats.request_finished()

    async def _send(self, uri: str, options: FetchOptions) -> tuple[LegacyResponse, Any]:
        res = await self._fetch(uri, options)
        response = fetch_to_request_response(options, res)
        body = await decode_response_body(response, res)
        return response, body

    # Any failure before the callback runs is handed to the caller.
    async def _dispatch_callback(self, uri: str, options: FetchOptions, callback: Callback) -> None:
        try:
            response, body = await self._send(uri, options)
        except Exception as exc:
            callback(exc, exc.response if isinstance(exc, TeenyRequestError) else None, None)
            return
        callback(None, response, body)

    async def _dispatch_stream(self, uri: str, options: FetchOptions, stream: ResponseStream) -> None:
        try:
            res = await self._fetch(uri, options)
        except Exception as exc:
            stream.fail(exc)
            return
        response = fetch_to_request_response(options, res, body=stream)
        await stream.attach(response, res, raw=options.compress is False)
