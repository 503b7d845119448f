"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    ErrorDetail,
    MessageResponse,
)
from models.catalog import (
    Option,
    Category,
    CatalogSnapshot,
    MergeOutcome,
    CategoryListResponse,
)
from models.wizard import (
    StepType,
    WizardStep,
    StepOutcome,
)
from models.quote import (
    DimensionField,
    QuoteState,
    DimensionUpdate,
    SelectionRequest,
    PreviewParams,
    PriceLine,
    SelectionLine,
    QuoteSummary,
)
from models.catalog_import import (
    ImportStatus,
    ImportRow,
    ExtractionResult,
    ImportResult,
    ImportStatusResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "ErrorDetail",
    "MessageResponse",

    # Catalog
    "Option",
    "Category",
    "CatalogSnapshot",
    "MergeOutcome",
    "CategoryListResponse",

    # Wizard
    "StepType",
    "WizardStep",
    "StepOutcome",

    # Quote
    "DimensionField",
    "QuoteState",
    "DimensionUpdate",
    "SelectionRequest",
    "PreviewParams",
    "PriceLine",
    "SelectionLine",
    "QuoteSummary",

    # Catalog import
    "ImportStatus",
    "ImportRow",
    "ExtractionResult",
    "ImportResult",
    "ImportStatusResponse",
]
