"""
Custom exception classes for the configurator.

Every error carries a stable code, a user-facing message and an HTTP status
so routes and the CLI can translate it without inspecting the type.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "CATEGORY_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} '{identifier}' not found",
            status_code=404,
            details={"id": identifier, **(details or {})}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with the current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Persistence operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# QUOTE ERRORS
# ===================

class QuoteValidationError(ValidationError):
    """A wizard step cannot be completed with the current quote."""

    def __init__(self, message: str, step_id: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(
            code="QUOTE_VALIDATION_ERROR",
            message=message,
            details={"step_id": step_id, **(details or {})}
        )


# ===================
# CATALOG ERRORS
# ===================

class CategoryNotFoundError(NotFoundError):
    """Catalog category not found."""

    def __init__(self, category_id: str):
        super().__init__(
            resource="Category",
            identifier=category_id,
            code="CATEGORY_NOT_FOUND"
        )


class OptionNotFoundError(NotFoundError):
    """Option not present in the category's current options."""

    def __init__(self, category_id: str, option_id: str):
        super().__init__(
            resource="Option",
            identifier=option_id,
            code="OPTION_NOT_FOUND",
            details={"category_id": category_id}
        )


# ===================
# CATALOG IMPORT ERRORS
# ===================

class ImportInputError(AppError):
    """Uploaded catalog rejected before extraction (400)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="IMPORT_INPUT_ERROR",
            message=message,
            status_code=400,
            details=details
        )


class ExtractionError(ExternalServiceError):
    """
    Catalog extraction failed.

    The cause groups failures for the user: "configuration" (missing or
    rejected credentials), "transient" (network, rate limit, server error),
    "unreadable_input" (the service could not read the document) and
    "no_data" (nothing usable came back).
    """

    CAUSES = ("configuration", "transient", "unreadable_input", "no_data")

    def __init__(
        self,
        message: str,
        cause: str = "transient",
        details: Optional[dict] = None
    ):
        if cause not in self.CAUSES:
            cause = "transient"
        super().__init__(
            service="extraction",
            message=message,
            details={"cause": cause, **(details or {})}
        )
        self.cause = cause


class NoDataFoundError(ExtractionError):
    """Extraction returned no usable rows (422)."""

    def __init__(self, message: str = "No product data found in the PDF. Make sure it contains technical tables.",
                 details: Optional[dict] = None):
        super().__init__(message=message, cause="no_data", details=details)
        self.code = "NO_DATA_FOUND"
        self.status_code = 422


class ImportInProgressError(ConflictError):
    """Another catalog import is still running."""

    def __init__(self, status: str):
        super().__init__(
            code="IMPORT_IN_PROGRESS",
            message="A catalog import is already in progress. Wait for it to finish.",
            details={"status": status}
        )
