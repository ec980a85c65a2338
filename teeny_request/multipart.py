import uuid
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Sequence

from .models import MultipartPart


def generate_boundary() -> str:
    return str(uuid.uuid4())


def multipart_content_type(boundary: str) -> str:
    return f"multipart/related; boundary={boundary}"


async def _iter_part_body(body: object) -> AsyncIterator[bytes]:
    if body is None:
        return
    if isinstance(body, str):
        yield body.encode("utf-8")
    elif isinstance(body, (bytes, bytearray, memoryview)):
        yield bytes(body)
    elif isinstance(body, AsyncIterable):
        async for chunk in body:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
    elif isinstance(body, Iterable):
        for chunk in body:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
    else:
        raise TypeError(f"Unsupported multipart body type: {type(body).__name__}")


async def create_multipart_stream(boundary: str, parts: Sequence[MultipartPart]) -> AsyncIterator[bytes]:
    """
    Build a multipart/related body from its parts.

    Each part is framed by ``--{boundary}`` and its own Content-Type. Streamed
    bodies are forwarded chunk by chunk; the closing ``--{boundary}--`` marker
    is only written once the last part is exhausted.
    """
    for part in parts:
        yield f"--{boundary}\r\nContent-Type: {part.content_type}\r\n\r\n".encode("utf-8")
        async for chunk in _iter_part_body(part.body):
            yield chunk
        yield b"\r\n"
    yield f"--{boundary}--".encode("utf-8")
