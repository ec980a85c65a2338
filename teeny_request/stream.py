import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from .exceptions import TransportError
from .models import LegacyResponse

Listener = Callable[..., Any]


class ResponseStream:
    """
    Handle returned by a request dispatched without a callback.

    It is handed back before the network call resolves. Exactly one of
    ``response`` or ``error`` is emitted once the transport settles. The body
    is only pulled from the transport while a consumer iterates the stream,
    at which point ``data`` is emitted per chunk, then ``end``. ``close`` is
    emitted once the underlying transfer is released.

    A non-2xx status is not an error here; check ``response.status_code``.
    """

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[tuple[Listener, bool]]] = defaultdict(list)
        self._settled = asyncio.Event()
        self._response: LegacyResponse | None = None
        self._error: BaseException | None = None
        self._res: httpx.Response | None = None
        self._raw = False
        self._consumed = False
        self._closed = False

    # ------------------------------------------------------------------
    # events
    # ------------------------------------------------------------------
    def on(self, event: str, listener: Listener) -> "ResponseStream":
        self._listeners[event].append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "ResponseStream":
        self._listeners[event].append((listener, True))
        return self

    def remove_listener(self, event: str, listener: Listener) -> "ResponseStream":
        self._listeners[event] = [entry for entry in self._listeners[event] if entry[0] is not listener]
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        listeners = list(self._listeners.get(event, ()))
        for entry in listeners:
            if entry[1]:
                self._listeners[event].remove(entry)
            entry[0](*args)
        return bool(listeners)

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    @property
    def response(self) -> LegacyResponse | None:
        return self._response

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    async def attach(self, response: LegacyResponse, res: httpx.Response, raw: bool = False) -> None:
        self._response = response
        self._res = res
        self._raw = raw
        self._settled.set()
        if self._closed:
            await res.aclose()
            return
        self.emit("response", response)

    def fail(self, error: BaseException) -> None:
        self._error = error
        self._settled.set()
        self.emit("error", error)

    async def wait_response(self) -> LegacyResponse:
        await self._settled.wait()
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response

    # ------------------------------------------------------------------
    # body
    # ------------------------------------------------------------------
    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_body()

    async def _iter_body(self) -> AsyncIterator[bytes]:
        response = await self.wait_response()
        if self._consumed:
            raise RuntimeError("Response body has already been consumed.")
        self._consumed = True
        if self._closed:
            return

        assert self._res is not None
        chunks = self._res.aiter_raw() if self._raw else self._res.aiter_bytes()
        try:
            async for chunk in chunks:
                if self._closed:
                    return
                self.emit("data", chunk)
                yield chunk
        except httpx.StreamError:
            if not self._closed:
                raise
            return
        except (httpx.HTTPError, OSError) as exc:
            if self._closed:
                return
            error = TransportError.from_exception(exc, response=response)
            self._error = error
            self.emit("error", error)
            raise error from exc
        finally:
            await chunks.aclose()

        self.emit("end")
        await self.aclose()

    async def read(self) -> bytes:
        return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        """Stop the transfer. The remote peer only sees the socket close."""
        if self._closed:
            return
        self._closed = True
        if self._res is not None:
            await self._res.aclose()
        self.emit("close")

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.aclose()
