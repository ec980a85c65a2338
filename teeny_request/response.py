import json
from typing import Any

import httpx

from .exceptions import DecodeError, TransportError
from .models import FetchOptions, LegacyResponse, RequestEcho

# Matched literally: "application/json;charset=UTF-8" and other spellings
# are decoded as text.
JSON_CONTENT_TYPES = ("application/json", "application/json; charset=utf-8")


def is_json_content_type(content_type: str | None) -> bool:
    return content_type in JSON_CONTENT_TYPES


def fetch_to_request_response(options: FetchOptions, res: httpx.Response, body: Any = None) -> LegacyResponse:
    headers = {key: value for key, value in res.headers.items()}
    request = RequestEcho(headers=options.headers, href=str(res.url), agent=options.agent)
    return LegacyResponse(
        status_code=res.status_code,
        status_message=res.reason_phrase,
        headers=headers,
        request=request,
        body=body,
    )


async def read_response_text(response: LegacyResponse, res: httpx.Response) -> str:
    try:
        content = await res.aread()
    except (httpx.HTTPError, OSError) as exc:
        raise TransportError.from_exception(exc, response=response) from exc
    return content.decode("utf-8", errors="replace")


async def decode_response_body(response: LegacyResponse, res: httpx.Response) -> Any:
    """
    Read and decode the body of ``res`` into ``response.body``.

    JSON content types are parsed; every other content type yields text. A
    204 with a JSON content type is not read and the response itself is
    returned as the body.
    """
    if is_json_content_type(res.headers.get("content-type")):
        if response.status_code == 204:
            await res.aclose()
            return response
        text = await read_response_text(response, res)
        try:
            body = json.loads(text)
        except ValueError as exc:
            raise DecodeError.invalid_json(response.request.href, exc, response) from exc
    else:
        body = await read_response_text(response, res)

    response.body = body
    return body
