"""
Base schemas shared by all models.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional

from exceptions import AppError


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow attribute-based construction (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class ErrorDetail(BaseSchema):
    """Serializable form of an AppError, returned instead of raising."""

    code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="User-facing message")
    status_code: int = Field(500, description="Matching HTTP status")
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_error(cls, error: AppError) -> "ErrorDetail":
        return cls(
            code=error.code,
            message=error.message,
            status_code=error.status_code,
            details=error.details,
        )


class MessageResponse(BaseSchema):
    """Plain acknowledgement."""
    success: bool = True
    message: str
    error: Optional[ErrorDetail] = None
