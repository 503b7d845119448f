"""
Catalog import schemas.

ImportRow validates one raw record returned by the extraction service;
records that fail validation are rejected before anything reaches the catalog.
"""

from enum import Enum
from pydantic import AliasChoices, Field, field_validator
from typing import Any, Literal, Optional

from models.base import BaseSchema, ErrorDetail
from models.catalog import MergeOutcome


class ImportStatus(str, Enum):
    """Progress of the catalog import entry point."""
    IDLE = "idle"
    READING = "reading"
    ANALYZING = "analyzing"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_busy(self) -> bool:
        return self in (ImportStatus.READING, ImportStatus.ANALYZING)


class ImportRow(BaseSchema):
    """
    One profile row extracted from a supplier catalog.

    Accepts the camelCase keys of the extraction schema (artCode) as well
    as snake_case.
    """

    art_code: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("artCode", "art_code"),
        description="Supplier article code",
        examples=["PL 2001"]
    )
    description: str = Field(..., description="Short description")
    weight: float = Field(..., ge=0, allow_inf_nan=False, description="Weight in gr/m")
    type: Literal["frame", "sash", "other"] = Field(..., description="Profile classification")

    @field_validator("type", mode="before")
    @classmethod
    def type_lowercase(cls, v: Any) -> Any:
        """Type is matched case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ExtractionResult(BaseSchema):
    """Raw output of the extraction service (rows not yet validated)."""
    items: list[dict[str, Any]] = Field(default_factory=list)


class ImportResult(BaseSchema):
    """
    Outcome of one catalog import.

    Errors are reported here; the pipeline never raises past its boundary.
    """

    success: bool
    status: ImportStatus
    message: str
    filename: Optional[str] = None
    imported: dict[str, int] = Field(default_factory=dict, description="Category id -> options added")
    rejected_rows: int = 0
    skipped_rows: int = 0
    merges: list[MergeOutcome] = Field(default_factory=list)
    error: Optional[ErrorDetail] = None


class ImportStatusResponse(BaseSchema):
    """Current state of the import entry point."""
    status: ImportStatus
    busy: bool
    last_result: Optional[ImportResult] = None
