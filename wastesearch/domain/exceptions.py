"""Domain exceptions for the reporting-unit search service.

Defines domain-level exceptions that represent rule violations of a search
request. These exceptions are independent of infrastructure concerns.
Presentation layer maps them to HTTP responses in exception handlers.
"""

from collections.abc import Iterable
from typing import Any


class WasteSearchException(Exception):
    """Base exception for all service errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, rejected values).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(WasteSearchException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional request field that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidSortFieldException(WasteSearchException):
    """Raised when a sort field is not in the closed sortable-field set."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Invalid sort field: {field}",
            "INVALID_SORT_FIELD",
            {"field": field},
        )


class AuthenticationException(WasteSearchException):
    """Raised when the request carries no authenticated caller."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ForbiddenException(WasteSearchException):
    """Raised when a restricted caller asks for clients outside their scope.

    The rejected client numbers are listed (sorted) in details["values"].
    """

    def __init__(self, values: Iterable[str], field: str = "clientNumbers") -> None:
        """Initialize with the rejected values.

        Args:
            values: Client numbers the caller is not authorized for.
            field: Request field the values came from.
        """
        rejected = sorted(set(values))
        super().__init__(
            f"Invalid value(s) selected for {field}: {', '.join(rejected)}",
            "FORBIDDEN",
            {"field": field, "values": rejected},
        )


class ResourceNotFoundException(WasteSearchException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'forest_client').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SearchUnavailableException(WasteSearchException):
    """Raised when a storage query (search or code lists) cannot be executed."""

    def __init__(
        self,
        message: str = "Reporting unit search is temporarily unavailable",
        error_code: str = "SEARCH_UNAVAILABLE",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class SearchTimeoutException(SearchUnavailableException):
    """Raised when the search pipeline exceeds its deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        """Initialize with the deadline that expired.

        Args:
            timeout_seconds: Configured pipeline deadline in seconds.
        """
        super().__init__(
            f"Reporting unit search timed out after {timeout_seconds} seconds",
            "SEARCH_TIMEOUT",
            {"timeout_seconds": timeout_seconds},
        )
