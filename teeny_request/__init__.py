"""Request-style callback and stream calls over an httpx fetch transport."""

import logging

from .agents import Agent, AgentPool, KeepAliveAgent, ProxyAgent, should_use_proxy_for_uri
from .client import Callback, TeenyRequest
from .exceptions import (
    DecodeError,
    InvalidRequestError,
    MultipartStreamingUnsupportedError,
    MultipartUnsupportedError,
    TeenyRequestError,
    TransportError,
)
from .models import FetchOptions, LegacyResponse, MultipartPart, PoolOptions, RequestEcho, RequestOptions
from .multipart import create_multipart_stream
from .options import merge_options, request_to_fetch_options
from .response import JSON_CONTENT_TYPES, decode_response_body, fetch_to_request_response
from .statistics import (
    TeenyStatistics,
    TeenyStatisticsCounters,
    TeenyStatisticsOptions,
    TeenyStatisticsWarning,
)
from .stream import ResponseStream
from .transport import HttpxTransport, Transport

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "TeenyRequest",
    "Callback",
    "RequestOptions",
    "FetchOptions",
    "LegacyResponse",
    "RequestEcho",
    "MultipartPart",
    "PoolOptions",
    "ResponseStream",
    "Transport",
    "HttpxTransport",
    "Agent",
    "AgentPool",
    "KeepAliveAgent",
    "ProxyAgent",
    "should_use_proxy_for_uri",
    "TeenyStatistics",
    "TeenyStatisticsCounters",
    "TeenyStatisticsOptions",
    "TeenyStatisticsWarning",
    "TeenyRequestError",
    "InvalidRequestError",
    "TransportError",
    "DecodeError",
    "MultipartUnsupportedError",
    "MultipartStreamingUnsupportedError",
    "JSON_CONTENT_TYPES",
    "create_multipart_stream",
    "decode_response_body",
    "fetch_to_request_response",
    "merge_options",
    "request_to_fetch_options",
]
