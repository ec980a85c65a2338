import warnings
from dataclasses import dataclass, replace

from .configs import StatisticsSettings


@dataclass
class TeenyStatisticsOptions:
    # Concurrent in-flight requests at which a warning is issued, 0 disables.
    # Falls back to TEENY_REQUEST_WARN_CONCURRENT_REQUESTS, then the default.
    concurrent_requests: int | None = None


@dataclass(frozen=True)
class TeenyStatisticsCounters:
    concurrent_requests: int = 0


class TeenyStatisticsWarning(RuntimeWarning):
    """Issued once a configured threshold is met."""

    CONCURRENT_REQUESTS = "ConcurrentRequestsExceededWarning"

    def __init__(self, message: str, type: str = "", value: int = 0, threshold: int = 0):
        super().__init__(message)
        self.type = type
        self.value = value
        self.threshold = threshold


class TeenyStatistics:
    """
    In-flight request tracking. Callers must pair every
    ``request_starting()`` with one ``request_finished()``.
    """

    DEFAULT_WARN_CONCURRENT_REQUESTS = 5000

    def __init__(self, opts: TeenyStatisticsOptions | None = None):
        self._options = self._prepare_options(opts)
        self._concurrent_requests = 0
        self._did_concurrent_request_warn = False

    def get_options(self) -> TeenyStatisticsOptions:
        return replace(self._options)

    def set_options(self, opts: TeenyStatisticsOptions | None = None) -> TeenyStatisticsOptions:
        """
        Replace the options. Unspecified options are not carried over from
        the previous ones; they are resolved again from the environment or
        defaults. Returns the previous options.
        """
        old_options = self._options
        self._options = self._prepare_options(opts)
        return old_options

    @property
    def counters(self) -> TeenyStatisticsCounters:
        return TeenyStatisticsCounters(concurrent_requests=self._concurrent_requests)

    def reset(self) -> None:
        self._concurrent_requests = 0
        self._did_concurrent_request_warn = False

    def request_starting(self) -> None:
        self._concurrent_requests += 1

        threshold = self._options.concurrent_requests or 0
        if threshold > 0 and self._concurrent_requests >= threshold and not self._did_concurrent_request_warn:
            self._did_concurrent_request_warn = True
            warning = TeenyStatisticsWarning(
                "Possible excessive concurrent requests detected. "
                f"{self._concurrent_requests} requests in-flight, which exceeds the configured "
                f"threshold of {threshold}. Use the TEENY_REQUEST_WARN_CONCURRENT_REQUESTS "
                "environment variable or the concurrent_requests option of teeny_request to "
                "increase or disable (0) this warning.",
                type=TeenyStatisticsWarning.CONCURRENT_REQUESTS,
                value=self._concurrent_requests,
                threshold=threshold,
            )
            warnings.warn(warning, stacklevel=2)

    def request_finished(self) -> None:
        self._concurrent_requests -= 1

    @classmethod
    def _prepare_options(cls, opts: TeenyStatisticsOptions | None) -> TeenyStatisticsOptions:
        if opts is not None and opts.concurrent_requests is not None:
            return TeenyStatisticsOptions(concurrent_requests=opts.concurrent_requests)

        env_value = StatisticsSettings().TEENY_REQUEST_WARN_CONCURRENT_REQUESTS
        if env_value is not None:
            return TeenyStatisticsOptions(concurrent_requests=env_value)
        return TeenyStatisticsOptions(concurrent_requests=cls.DEFAULT_WARN_CONCURRENT_REQUESTS)
