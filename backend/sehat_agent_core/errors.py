from __future__ import annotations


class SehatError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SehatError):
    status_code = 400
    code = "validation_error"


class ConfigurationError(SehatError):
    status_code = 503
    code = "configuration_error"


class UpstreamError(SehatError):
    status_code = 502
    code = "upstream_error"

    def __init__(self, message: str, *, upstream_status: int | None = None, retryable: bool = False) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.retryable = retryable


class RateLimitError(SehatError):
    status_code = 429
    code = "rate_limited"


class ForbiddenError(SehatError):
    status_code = 403
    code = "forbidden"


class StreamFailure(SehatError):
    """Raised inside an open stream; rendered as an ``error`` event, never as a status code."""

    code = "stream_failure"
