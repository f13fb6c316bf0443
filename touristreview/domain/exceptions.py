"""Domain exceptions for the TouristReview application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any

from touristreview.domain.enums import LocationErrorKind


class TouristReviewException(Exception):
    """Base exception for all TouristReview application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
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
        """Return the JSON body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TouristReviewException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidPlaceKeyException(ValidationException):
    """Raised when a place key cannot be decoded where a valid one is required."""

    def __init__(self, place_key: str) -> None:
        super().__init__(f"Malformed place key: {place_key!r}", field="place_key")
        self.error_code = "INVALID_PLACE_KEY"
        self.details["place_key"] = place_key


class AuthenticationException(TouristReviewException):
    """Raised when authentication fails (e.g. missing or invalid ID token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(TouristReviewException):
    """Raised when the caller may not see or change the resource."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'profile', 'rated_places').
            action: Optional action that was attempted (e.g. 'read').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(TouristReviewException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'friend_request').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class UserAlreadyExistsException(TouristReviewException):
    """Raised when registering a uid that already has a user document."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"User already exists: {user_id}",
            "USER_ALREADY_EXISTS",
            {"user_id": user_id},
        )


class DocumentStoreException(TouristReviewException):
    """Raised when the document store rejects or fails a request."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Document store {operation} failed: {reason}",
            "DOCUMENT_STORE_ERROR",
            {"operation": operation, "reason": reason},
        )


class TransactionConflictException(TouristReviewException):
    """Raised when a transaction keeps aborting on contention after all retries."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Transaction aborted after {attempts} attempt(s)",
            "TRANSACTION_CONFLICT",
            {"attempts": attempts},
        )


class MapGatewayException(TouristReviewException):
    """Raised when the map search gateway fails.

    kind classifies the failure the same way the device location stack does
    (denied, restricted, unknown location, access denied, network, other).
    """

    def __init__(self, kind: LocationErrorKind, message: str | None = None) -> None:
        super().__init__(
            message or kind.description,
            "MAP_GATEWAY_ERROR",
            {"kind": kind.value},
        )
        self.kind = kind
