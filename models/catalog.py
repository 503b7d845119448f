"""
Catalog schemas: options, categories and the persisted snapshot.
"""

from pydantic import Field
from typing import Literal, Optional

from models.base import BaseSchema, ErrorDetail


CategoryType = Literal["frame", "sash", "accessory", "other"]


class Option(BaseSchema):
    """
    A selectable product variant (e.g. "PVC", "White", "Double glass").

    Technical fields (code, weight, category_type) are only set on options
    that came from a catalog import.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Option id, unique within its category",
        examples=["pvc", "pl-2001"]
    )
    name: str = Field(..., description="Display name")
    description: str = Field("", description="Display description")
    image_url: Optional[str] = Field(None, description="Thumbnail URL")
    base_price: float = Field(
        ...,
        ge=0,
        description="Price per m² (material, glass) or flat (opening, color)"
    )
    price_multiplier: float = Field(
        1.0,
        gt=0,
        description="Complexity multiplier"
    )
    code: Optional[str] = Field(None, description="Supplier article code", examples=["PL 2001"])
    weight: Optional[float] = Field(None, ge=0, description="Profile weight in gr/m")
    category_type: Optional[CategoryType] = Field(None, description="Profile classification")


class Category(BaseSchema):
    """
    A named group of options presented as one wizard step.

    Option order is display order.
    """

    id: str = Field(..., min_length=1, description="Stable category key")
    title: str = Field(..., description="Step title")
    subtitle: str = Field("", description="Step subtitle")
    options: list[Option] = Field(default_factory=list)

    def find_option(self, option_id: str) -> Optional[Option]:
        """First option with this id (imported options come first)."""
        for option in self.options:
            if option.id == option_id:
                return option
        return None


class CatalogSnapshot(BaseSchema):
    """Full catalog state; the unit of persistence."""

    categories: dict[str, Category] = Field(default_factory=dict)


class MergeOutcome(BaseSchema):
    """Result of merging imported options into one category."""

    category_id: str
    success: bool
    added: int = 0
    error: Optional[ErrorDetail] = None


class CategoryListResponse(BaseSchema):
    """List of categories."""

    data: list[Category]
    total: int
