"""
Quote schemas: the in-progress configuration and its read-side summary.
"""

from enum import Enum
from pydantic import Field
from typing import Optional

from models.base import BaseSchema
from models.catalog import Option


class DimensionField(str, Enum):
    """Editable quote dimensions."""
    WIDTH = "width"
    HEIGHT = "height"


class QuoteState(BaseSchema):
    """
    The user's current configuration.

    Width and height are centimeters and are not clamped here; range checks
    happen when leaving the dimensions step.
    """

    width: float = Field(120, description="Width in cm")
    height: float = Field(140, description="Height in cm")
    selections: dict[str, Option] = Field(
        default_factory=dict,
        description="Category id -> selected option"
    )

    @property
    def area_m2(self) -> float:
        return (self.width * self.height) / 10000


# ===================
# REQUESTS
# ===================

class DimensionUpdate(BaseSchema):
    """Set one dimension."""
    value: float = Field(..., description="New value in cm")


class SelectionRequest(BaseSchema):
    """Select an option of a category by id."""
    option_id: str = Field(..., min_length=1)


# ===================
# SUMMARY
# ===================

class PreviewParams(BaseSchema):
    """Input of the external window preview renderer."""
    width: float
    height: float
    color_id: str
    opening_id: str


class PriceLine(BaseSchema):
    """One itemized contribution to the total."""
    category_id: str
    label: str
    option_id: str
    option_name: str
    area_scaled: bool
    amount: float


class SelectionLine(BaseSchema):
    """Summary row for a selection step (option_name None while pending)."""
    step_id: str
    title: str
    option_id: Optional[str] = None
    option_name: Optional[str] = None


class QuoteSummary(BaseSchema):
    """Everything the summary panel shows for the current quote."""
    width: float
    height: float
    area_m2: float
    current_step_index: int
    current_step_id: str
    step_count: int
    progress_percent: float
    selections: list[SelectionLine]
    breakdown: list[PriceLine]
    total: int
    preview: PreviewParams
    warnings: list[str] = Field(default_factory=list)
