"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AddressNotFoundError(DomainException):
    """Address or place id could not be resolved to a location"""

    pass


class RateLimitedError(DomainException):
    """Upstream provider signalled quota exhaustion"""

    def __init__(self, upstream: str, message: str | None = None):
        self.upstream = upstream
        super().__init__(message or f"{upstream} rate limit reached")


class UpstreamTimeoutError(DomainException):
    """Upstream call exceeded its configured deadline"""

    def __init__(self, upstream: str, timeout_seconds: float):
        self.upstream = upstream
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{upstream} timeout after {timeout_seconds}s")


class UpstreamError(DomainException):
    """Upstream returned a non-success status or could not be reached"""

    def __init__(self, upstream: str, message: str, status: str | int | None = None, detail: str | None = None):
        self.upstream = upstream
        self.status = status
        self.detail = detail
        super().__init__(message)


class InsightGenerationError(DomainException):
    """Model-backed insight generation failed; always replaced by the fallback pack"""

    pass
