"""
Price estimate for a quote.

Pure functions of (QuoteState, CatalogStore): no I/O, no side effects,
never raise. A quote whose price is not a finite number (NaN or overflowing
dimensions built outside the wizard) prices at 0.

Formula:
    area  = width * height / 10000                      (cm² -> m²)
    total = area * material.base_price * material.multiplier
          + area * glass.base_price * glass.multiplier
          + opening.base_price * opening.multiplier
          + color.base_price                           (multiplier not applied)
"""

import math
from dataclasses import dataclass
from typing import Optional
import structlog

from config.catalog_defaults import COLOR, GLASS, MATERIAL, OPENING
from models.catalog import Option
from models.quote import PriceLine, QuoteState
from services.catalog_service import CatalogStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PricingRule:
    """How one category contributes to the total."""
    category_id: str
    area_scaled: bool
    apply_multiplier: bool

    def amount(self, option: Option, area_m2: float) -> float:
        value = option.base_price
        if self.apply_multiplier:
            value *= option.price_multiplier
        if self.area_scaled:
            value *= area_m2
        return value


# Material and glass are layered per-m² costs; opening and color are flat.
# Color intentionally ignores price_multiplier.
PRICING_RULES: tuple[PricingRule, ...] = (
    PricingRule(MATERIAL, area_scaled=True, apply_multiplier=True),
    PricingRule(GLASS, area_scaled=True, apply_multiplier=True),
    PricingRule(OPENING, area_scaled=False, apply_multiplier=True),
    PricingRule(COLOR, area_scaled=False, apply_multiplier=False),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _contributions(quote: QuoteState) -> list[tuple[PricingRule, Option, float]]:
    area = quote.area_m2
    result = []
    for rule in PRICING_RULES:
        option: Optional[Option] = quote.selections.get(rule.category_id)
        if option is None:
            continue
        result.append((rule, option, rule.amount(option, area)))
    return result


def compute_total(quote: QuoteState, store: CatalogStore) -> int:
    """
    Estimated price of the quote in whole currency units.

    Missing selections contribute zero; a zero area simply zeroes the
    area-scaled terms. A non-finite sum gives 0.
    """
    total = sum(amount for _, _, amount in _contributions(quote))
    if not math.isfinite(total):
        logger.warning("quote_total_not_finite", width=quote.width, height=quote.height)
        return 0
    return round_half_up(total)


def price_breakdown(quote: QuoteState, store: CatalogStore) -> list[PriceLine]:
    """
    Itemized contributions, labelled with the category titles of the store.

    Amounts are rounded to cents for display; the total is computed from the
    unrounded values.
    """
    lines = []
    for rule, option, amount in _contributions(quote):
        category = store.get(rule.category_id)
        lines.append(PriceLine(
            category_id=rule.category_id,
            label=category.title if category else rule.category_id,
            option_id=option.id,
            option_name=option.name,
            area_scaled=rule.area_scaled,
            amount=round(amount, 2) if math.isfinite(amount) else 0.0,
        ))
    return lines
