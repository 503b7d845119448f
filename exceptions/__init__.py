"""
Custom exceptions module.

Import from here rather than from exceptions.errors.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Quote
    QuoteValidationError,

    # Catalog
    CategoryNotFoundError,
    OptionNotFoundError,

    # Catalog import
    ImportInputError,
    ExtractionError,
    NoDataFoundError,
    ImportInProgressError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Quote
    "QuoteValidationError",

    # Catalog
    "CategoryNotFoundError",
    "OptionNotFoundError",

    # Catalog import
    "ImportInputError",
    "ExtractionError",
    "NoDataFoundError",
    "ImportInProgressError",
]
