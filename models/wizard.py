"""
Wizard step configuration and navigation outcomes.
"""

from enum import Enum
from pydantic import ConfigDict, Field, model_validator
from typing import Optional

from models.base import BaseSchema, ErrorDetail


class StepType(str, Enum):
    """Kinds of wizard steps."""
    DIMENSIONS = "dimensions"
    SELECTION = "selection"


class WizardStep(BaseSchema):
    """
    One step of the configurator.

    Selection steps point at the catalog category they choose from.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    type: StepType
    title: str
    category_id: Optional[str] = Field(None, description="Category chosen in this step")

    @model_validator(mode="after")
    def selection_needs_category(self) -> "WizardStep":
        if self.type == StepType.SELECTION and not self.category_id:
            raise ValueError(f"selection step '{self.id}' needs a category_id")
        return self


class StepOutcome(BaseSchema):
    """
    Result of advance()/retreat().

    Validation failures are reported here, never raised.
    """

    ok: bool
    step_index: int
    step_id: str
    completed: bool = False
    error: Optional[ErrorDetail] = None
