"""Error taxonomy shared by the case store, lifecycle, tracking and OTP helpers."""
from typing import Iterable


class CaseError(Exception):
    """Base class for failures surfaced by case and credential operations."""

    status_code = 500
    public_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class CaseValidationError(CaseError):
    """Raised when required fields are missing or malformed. Never touches storage."""

    status_code = 400
    public_message = "Missing required fields."

    def __init__(self, message: str | None = None, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)


class CaseNotFoundError(CaseError):
    status_code = 404
    public_message = "Case ID not found"


class CaseConflictError(CaseError):
    """Raised on identifier collisions or other constraint violations."""

    status_code = 409
    public_message = "Could not allocate a unique case identifier."


class CaseStoreError(CaseError):
    """Raised when the database cannot be reached or a query fails."""

    status_code = 500
    public_message = "Server error"
