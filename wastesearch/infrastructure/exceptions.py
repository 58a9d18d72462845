"""Infrastructure exceptions for the Forest Client upstream.

Upstream errors extend WasteSearchException so presentation can map them
to HTTP responses consistently if one ever escapes the resolver fallback.
Only UpstreamUnavailableException is retriable.
"""

from datetime import timedelta

from wastesearch.domain.exceptions import WasteSearchException


class UpstreamException(WasteSearchException):
    """Base exception for Forest Client API calls."""


class UpstreamNotFoundException(UpstreamException):
    """The upstream answered 404 for the requested resource."""

    def __init__(self, operation: str, resource_id: str | None = None) -> None:
        super().__init__(
            f"Forest Client {operation} found nothing",
            "UPSTREAM_NOT_FOUND",
            {"operation": operation, "resource_id": resource_id},
        )


class UpstreamRateLimitedException(UpstreamException):
    """The upstream answered 429; retry_after holds its advisory (if any)."""

    def __init__(self, operation: str, retry_after: timedelta | None = None) -> None:
        self.retry_after = retry_after
        details: dict = {"operation": operation}
        if retry_after is not None:
            details["retry_after_seconds"] = int(retry_after.total_seconds())
        super().__init__(
            f"Forest Client rate limit reached during {operation}",
            "UPSTREAM_RATE_LIMITED",
            details,
        )


class UpstreamRequestException(UpstreamException):
    """The upstream rejected the request (4xx other than 404/429). Terminal."""

    def __init__(self, operation: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(
            f"Forest Client rejected {operation} with status {status_code}",
            "UPSTREAM_REQUEST_ERROR",
            {"operation": operation, "status_code": status_code},
        )


class UpstreamUnavailableException(UpstreamException):
    """5xx, timeout or transport failure. Retriable."""

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        details: dict = {"operation": operation, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Forest Client unavailable during {operation}: {reason}",
            "UPSTREAM_UNAVAILABLE",
            details,
        )


class CircuitOpenException(UpstreamUnavailableException):
    """The breaker for the dependency is open; the call was not attempted."""

    def __init__(self, breaker_name: str) -> None:
        super().__init__(breaker_name, "circuit breaker is open")
