from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProxySettings(BaseSettings):
    """
    Proxy variables from the environment. Upper- and lower-case names are
    distinct settings; the first non-empty one in declaration order wins.
    """

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    HTTP_PROXY: str | None = Field(default=None, description="Proxy URL for outgoing requests")
    http_proxy: str | None = Field(default=None, description="Lower-case form of HTTP_PROXY")
    HTTPS_PROXY: str | None = Field(
        default=None,
        description="Proxy URL for outgoing requests, used when no HTTP proxy is set",
    )
    https_proxy: str | None = Field(default=None, description="Lower-case form of HTTPS_PROXY")

    NO_PROXY: str | None = Field(
        default=None,
        description="Comma-separated hostnames/domains that bypass the proxy",
    )
    no_proxy: str | None = Field(default=None, description="Lower-case form of NO_PROXY")

    @property
    def proxy(self) -> str | None:
        return self.HTTP_PROXY or self.http_proxy or self.HTTPS_PROXY or self.https_proxy or None

    @property
    def no_proxy_list(self) -> list[str]:
        raw = self.NO_PROXY or self.no_proxy
        if not raw:
            return []
        return [entry.strip() for entry in raw.split(",")]


class StatisticsSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    TEENY_REQUEST_WARN_CONCURRENT_REQUESTS: int | None = Field(
        default=None,
        description="Concurrent in-flight requests before a warning is issued, 0 disables",
    )

    @field_validator("TEENY_REQUEST_WARN_CONCURRENT_REQUESTS", mode="before")
    @classmethod
    def parse_threshold(cls, v: object) -> int | None:
        if v is None or isinstance(v, int):
            return v
        text = str(v).strip()
        if not text:
            return 0
        try:
            return int(float(text))
        except (ValueError, OverflowError):
            return None
