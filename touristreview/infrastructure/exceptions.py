"""Object storage errors (profile pictures).

Raised by the storage backends; the API maps them by error_code like any
other TouristReviewException.
"""

from touristreview.domain.exceptions import TouristReviewException


class StorageError(TouristReviewException):
    """A backend call (upload, download, delete, head) failed."""

    def __init__(self, storage_ref: str, operation: str, reason: str) -> None:
        super().__init__(
            f"Storage {operation} failed for {storage_ref}",
            "STORAGE_ERROR",
            {"storage_ref": storage_ref, "operation": operation, "reason": reason},
        )
        self.operation = operation


class StorageNotFoundError(TouristReviewException):
    """No object under the ref (or an unknown download token)."""

    def __init__(self, storage_ref: str) -> None:
        super().__init__(
            f"Stored object not found: {storage_ref}",
            "STORAGE_NOT_FOUND",
            {"storage_ref": storage_ref},
        )


class StoragePermissionError(TouristReviewException):
    """Ref escapes the storage root or names a metadata sidecar."""

    def __init__(self, storage_ref: str) -> None:
        super().__init__(
            f"Storage path not allowed: {storage_ref}",
            "STORAGE_PERMISSION_ERROR",
            {"storage_ref": storage_ref},
        )
