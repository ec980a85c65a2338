import json

import httpx
import pytest

from teeny_request.exceptions import DecodeError, TransportError
from teeny_request.models import FetchOptions
from teeny_request.response import (
    decode_response_body,
    fetch_to_request_response,
    is_json_content_type,
)


class TestIsJsonContentType:
    @pytest.mark.parametrize("content_type", ["application/json", "application/json; charset=utf-8"])
    def test_json(self, content_type):
        assert is_json_content_type(content_type) is True

    @pytest.mark.parametrize(
        "content_type",
        [
            None,
            "text/plain",
            "application/json;charset=utf-8",
            "application/json; charset=UTF-8",
            "application/json; charset=latin-1",
            "Application/JSON",
            "application/vnd.api+json",
        ],
    )
    def test_not_json(self, content_type):
        assert is_json_content_type(content_type) is False


class TestFetchToRequestResponse:
    def test_translation(self, make_response):
        res = make_response(
            201,
            headers={"Content-Type": "text/plain", "X-Trace": "abc"},
            content=b"ok",
            uri="https://example.com/items?a=1",
        )
        options = FetchOptions(headers={"X-Request-Id": "1"})
        response = fetch_to_request_response(options, res)

        assert response.status_code == 201
        assert response.status_message == "Created"
        assert response.headers["content-type"] == "text/plain"
        assert response.headers["x-trace"] == "abc"
        assert response.request.headers == {"X-Request-Id": "1"}
        assert response.request.href == "https://example.com/items?a=1"
        assert response.request.agent is None
        assert response.body is None

    def test_to_json(self, make_response):
        res = make_response(headers={"X-A": "1"})
        response = fetch_to_request_response(FetchOptions(), res)
        assert response.to_json() == {"headers": response.headers}
        assert json.dumps(response.to_json())


class TestDecodeResponseBody:
    @pytest.mark.asyncio
    async def test_json(self, make_response):
        res = make_response(headers={"content-type": "application/json"}, content='{"hello":"🌍"}'.encode())
        response = fetch_to_request_response(FetchOptions(), res)
        body = await decode_response_body(response, res)
        assert body == {"hello": "🌍"}
        assert response.body == body

    @pytest.mark.asyncio
    async def test_text(self, make_response):
        res = make_response(headers={"content-type": "text/html"}, content="<p>🌍</p>".encode(), streamed=True)
        response = fetch_to_request_response(FetchOptions(), res)
        assert await decode_response_body(response, res) == "<p>🌍</p>"

    @pytest.mark.asyncio
    async def test_json_with_other_spelling_is_text(self, make_response):
        res = make_response(headers={"content-type": "application/json;charset=UTF-8"}, content=b'{"a": 1}')
        response = fetch_to_request_response(FetchOptions(), res)
        assert await decode_response_body(response, res) == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_invalid_json(self, make_response):
        res = make_response(headers={"content-type": "application/json"}, content="🚨".encode())
        response = fetch_to_request_response(FetchOptions(), res)
        with pytest.raises(DecodeError) as exc_info:
            await decode_response_body(response, res)
        assert str(exc_info.value).startswith("invalid json response body at https://example.com")
        assert "Expecting value" in str(exc_info.value)
        assert exc_info.value.response is response

    @pytest.mark.asyncio
    async def test_no_content_json(self, make_response):
        res = make_response(204, headers={"content-type": "application/json"})
        response = fetch_to_request_response(FetchOptions(), res)
        assert await decode_response_body(response, res) is response

    @pytest.mark.asyncio
    async def test_read_failure(self, make_response):
        async def broken():
            yield b"partial"
            raise httpx.ReadError("connection reset")

        request = httpx.Request("GET", "https://example.com")
        res = httpx.Response(200, headers={"content-type": "text/plain"}, content=broken(), request=request)
        response = fetch_to_request_response(FetchOptions(), res)
        with pytest.raises(TransportError) as exc_info:
            await decode_response_body(response, res)
        assert exc_info.value.code == "ReadError"
        assert exc_info.value.response is response
