from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, ClassVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import InvalidRequestError

if TYPE_CHECKING:
    from .agents import Agent


class PoolOptions(BaseModel):
    """Connection pool tuning, applied only when a dedicated agent is created."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    # httpx's own client defaults
    DEFAULT_MAX_SOCKETS: ClassVar[int] = 100
    DEFAULT_MAX_FREE_SOCKETS: ClassVar[int] = 20

    max_sockets: int | None = Field(default=None, alias="maxSockets", ge=1)
    max_free_sockets: int | None = Field(default=None, alias="maxFreeSockets", ge=0)

    def to_httpx_limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=self.max_sockets if self.max_sockets is not None else self.DEFAULT_MAX_SOCKETS,
            max_keepalive_connections=(
                self.max_free_sockets if self.max_free_sockets is not None else self.DEFAULT_MAX_FREE_SOCKETS
            ),
        )

    def signature(self) -> str:
        values = self.model_dump(by_alias=True, exclude_none=True)
        return ",".join(f"{key}={value}" for key, value in sorted(values.items()))


class MultipartPart(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    content_type: str = Field(alias="Content-Type")
    body: Any = None


class RequestOptions(BaseModel):
    """Legacy request options, as accepted by a request-style call."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    uri: str | None = None
    url: str | None = None
    method: str | None = None
    headers: dict[str, str] | None = None
    json_body: Any = Field(default=None, alias="json")
    body: Any = None
    qs: dict[str, Any] | str | None = None
    use_querystring: bool = Field(default=False, alias="useQuerystring")
    gzip: bool | None = None
    timeout: float | None = Field(default=None, ge=0)
    proxy: str | None = None
    forever: bool = False
    pool: PoolOptions | None = None
    multipart: list[MultipartPart] | None = None

    @classmethod
    def parse(cls, options: "RequestOptions | Mapping[str, Any]") -> "RequestOptions":
        if isinstance(options, RequestOptions):
            return options
        try:
            return cls.model_validate(dict(options))
        except ValidationError as exc:
            raise InvalidRequestError(str(exc)) from exc

    def to_mapping(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


@dataclass(frozen=True)
class FetchOptions:
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    timeout: float | None = None
    compress: bool | None = None
    agent: "Agent | None" = None

    def with_headers(self, headers: Mapping[str, str]) -> "FetchOptions":
        return replace(self, headers={**self.headers, **headers})

    def with_body(self, body: Any) -> "FetchOptions":
        return replace(self, body=body)

    def with_compress(self, compress: bool) -> "FetchOptions":
        return replace(self, compress=compress)


@dataclass(frozen=True)
class RequestEcho:
    headers: dict[str, str]
    href: str
    agent: "Agent | None" = None


@dataclass
class LegacyResponse:
    status_code: int
    status_message: str
    headers: dict[str, str]
    request: RequestEcho
    body: Any = None

    def to_json(self) -> dict[str, Any]:
        return {"headers": self.headers}
