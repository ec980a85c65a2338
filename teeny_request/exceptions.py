from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import LegacyResponse


class TeenyRequestError(Exception):
    detail: str = "Request failed."

    def __init__(self, detail: str | None = None, response: "LegacyResponse | None" = None):
        self.detail = detail or self.__class__.detail
        self.response = response
        super().__init__(self.detail)


# =============================================================================
# Raised synchronously, before any network activity
# =============================================================================
class InvalidRequestError(TeenyRequestError, ValueError):
    detail = "Missing uri or url in reqOpts."


class MultipartUnsupportedError(TeenyRequestError, NotImplementedError):
    detail = "Multipart without callback is not implemented."


MultipartStreamingUnsupportedError = MultipartUnsupportedError


# =============================================================================
# Reported through the callback or the stream's error event
# =============================================================================
class TransportError(TeenyRequestError):
    detail = "Request could not be completed."

    def __init__(
        self,
        detail: str | None = None,
        code: str | None = None,
        response: "LegacyResponse | None" = None,
    ):
        super().__init__(detail, response)
        self.code = code

    @classmethod
    def from_exception(cls, exc: BaseException, response: Any = None) -> "TransportError":
        return cls(str(exc) or None, code=type(exc).__name__, response=response)


class DecodeError(TeenyRequestError):
    detail = "invalid json response body"

    @classmethod
    def invalid_json(cls, url: str, exc: ValueError, response: "LegacyResponse") -> "DecodeError":
        return cls(f"invalid json response body at {url} reason: {exc}", response=response)
