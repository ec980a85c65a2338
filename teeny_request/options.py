"""
Normalization of legacy request options into a fetch request.

Options may name the target as ``uri`` or ``url``, carry a JSON value, a
string or a binary body, and a query object. All of that is resolved here,
once, into ``(uri, FetchOptions)``.
"""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode

from .agents import AgentPool
from .exceptions import InvalidRequestError
from .models import FetchOptions, RequestOptions

OptionsLike = RequestOptions | Mapping[str, Any]


def merge_options(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overrides`` over ``defaults`` without touching either."""
    merged: dict[str, Any] = dict(defaults)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_options(current, value)
        else:
            merged[key] = value
    return merged


def as_mapping(options: OptionsLike) -> dict[str, Any]:
    if isinstance(options, RequestOptions):
        return options.to_mapping()
    return dict(options)


def _serialize_body(req_opts: RequestOptions) -> tuple[Any, bool]:
    json_body = req_opts.json_body
    if isinstance(json_body, (Mapping, list, tuple)):
        return json.dumps(json_body), True

    body = req_opts.body
    if body is None or isinstance(body, (str, bytes)):
        return body, False
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body), False
    return json.dumps(body), False


def _query_value(value: Any) -> str:
    # Booleans render lower-case; anything that is not a scalar renders empty.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def _serialize_query(qs: Mapping[str, Any] | str | None) -> str:
    if qs is None:
        return ""
    if isinstance(qs, str):
        return qs
    params = {
        key: [_query_value(item) for item in value] if isinstance(value, (list, tuple)) else _query_value(value)
        for key, value in qs.items()
    }
    return urlencode(params, doseq=True, quote_via=quote)


def request_to_fetch_options(
    req_opts: RequestOptions,
    agent_pool: AgentPool | None = None,
) -> tuple[str, FetchOptions]:
    headers = dict(req_opts.headers or {})

    body, is_json = _serialize_body(req_opts)
    if is_json:
        headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
        headers["Content-Type"] = "application/json"

    uri = req_opts.uri or req_opts.url
    if not uri:
        raise InvalidRequestError()

    if req_opts.use_querystring or isinstance(req_opts.qs, (Mapping, str)):
        uri = f"{uri}?{_serialize_query(req_opts.qs)}"

    options = FetchOptions(
        method=req_opts.method or "GET",
        headers=headers,
        body=body,
        timeout=req_opts.timeout or None,
        compress=req_opts.gzip or None,
        agent=agent_pool.get_agent(uri, req_opts) if agent_pool is not None else None,
    )
    return uri, options
