"""
Wizard controller.

Owns the ordered step sequence and the current position, validates a step
before moving past it and applies selections/dimensions to the quote.

Navigation is linear: no branching, no skipping. Completing the last step
fires the completion listeners but does not move the index; there is no
separate "completed" state.
"""

import math
from typing import Callable, Optional, Sequence, Union
import structlog

from config.catalog_defaults import WIZARD_STEPS
from config.settings import settings
from models.base import ErrorDetail
from models.catalog import Category, Option
from models.quote import DimensionField, QuoteState
from models.wizard import StepOutcome, StepType, WizardStep
from services.catalog_service import CatalogStore
from exceptions import QuoteValidationError

logger = structlog.get_logger(__name__)

CompletionListener = Callable[[QuoteState], None]


def new_quote() -> QuoteState:
    """Quote with default dimensions and no selections."""
    return QuoteState(
        width=settings.default_width_cm,
        height=settings.default_height_cm,
    )


class WizardController:
    """
    Step navigation over one QuoteState.

    The catalog store is only read, to show the options of the current step.
    """

    def __init__(
        self,
        store: CatalogStore,
        steps: Sequence[WizardStep] = WIZARD_STEPS,
        quote: Optional[QuoteState] = None,
        min_dimension_cm: Optional[float] = None,
    ):
        if not steps:
            raise ValueError("wizard needs at least one step")

        self.store = store
        self.steps: tuple[WizardStep, ...] = tuple(steps)
        self.quote = quote if quote is not None else new_quote()
        self.min_dimension_cm = (
            min_dimension_cm if min_dimension_cm is not None else settings.min_dimension_cm
        )
        self._current_step_index = 0
        self._completion_listeners: list[CompletionListener] = []

    # ===================
    # POSITION
    # ===================

    @property
    def current_step_index(self) -> int:
        return self._current_step_index

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> WizardStep:
        return self.steps[self._current_step_index]

    @property
    def is_last_step(self) -> bool:
        return self._current_step_index == self.step_count - 1

    @property
    def progress_percent(self) -> float:
        return round((self._current_step_index + 1) / self.step_count * 100, 2)

    def current_category(self) -> Optional[Category]:
        """Category of the current selection step, read from the live store."""
        step = self.current_step
        if step.type != StepType.SELECTION:
            return None
        return self.store.get(step.category_id)

    # ===================
    # LISTENERS
    # ===================

    def on_complete(self, listener: CompletionListener) -> None:
        """Register a callback fired when the last step is confirmed."""
        self._completion_listeners.append(listener)

    # ===================
    # VALIDATION
    # ===================

    def validate_step(self, step: WizardStep) -> Optional[QuoteValidationError]:
        """
        Check whether the quote satisfies a step.

        Returns:
            The validation error, or None if the step is complete
        """
        if step.type == StepType.DIMENSIONS:
            minimum = self.min_dimension_cm
            # NaN fails both comparisons
            if not (self.quote.width >= minimum and self.quote.height >= minimum):
                return QuoteValidationError(
                    f"Please enter valid dimensions (min {minimum:g} cm).",
                    step_id=step.id,
                    details={
                        "width": self.quote.width,
                        "height": self.quote.height,
                        "min_cm": minimum,
                    }
                )
            return None

        if self.quote.selections.get(step.category_id) is None:
            return QuoteValidationError(
                "Select an option to continue.",
                step_id=step.id,
                details={"category_id": step.category_id}
            )
        return None

    # ===================
    # NAVIGATION
    # ===================

    def advance(self) -> StepOutcome:
        """
        Validate the current step and move to the next one.

        On the last step a successful validation fires the completion
        listeners and leaves the index unchanged. Validation failures are
        reported in the outcome and never raised.
        """
        step = self.current_step
        error = self.validate_step(step)

        if error is not None:
            logger.info(
                "wizard_step_invalid",
                step_id=step.id,
                step_index=self._current_step_index,
                reason=error.message
            )
            return StepOutcome(
                ok=False,
                step_index=self._current_step_index,
                step_id=step.id,
                error=ErrorDetail.from_error(error),
            )

        if not self.is_last_step:
            self._current_step_index += 1
            logger.debug(
                "wizard_advanced",
                from_step=step.id,
                to_step=self.current_step.id,
                step_index=self._current_step_index
            )
            return StepOutcome(
                ok=True,
                step_index=self._current_step_index,
                step_id=self.current_step.id,
            )

        logger.info(
            "configuration_completed",
            width=self.quote.width,
            height=self.quote.height,
            selections={key: option.id for key, option in self.quote.selections.items()}
        )
        for listener in self._completion_listeners:
            listener(self.quote)

        return StepOutcome(
            ok=True,
            step_index=self._current_step_index,
            step_id=step.id,
            completed=True,
        )

    def retreat(self) -> StepOutcome:
        """Go back one step; no-op on the first step."""
        if self._current_step_index > 0:
            self._current_step_index -= 1
            logger.debug("wizard_retreated", step_index=self._current_step_index)

        return StepOutcome(
            ok=True,
            step_index=self._current_step_index,
            step_id=self.current_step.id,
        )

    # ===================
    # QUOTE MUTATIONS
    # ===================

    def select(self, category_id: str, option: Option) -> None:
        """
        Set the selection for a category.

        Does not check that the option belongs to the category; callers
        resolve options from the store.
        """
        self.quote.selections[category_id] = option
        logger.debug("option_selected", category_id=category_id, option_id=option.id)

    def clear_selection(self, category_id: str) -> Optional[Option]:
        return self.quote.selections.pop(category_id, None)

    def set_dimension(self, field: Union[DimensionField, str], value: float) -> None:
        """
        Set width or height without range checks.

        Raises:
            QuoteValidationError: Unknown field, non-numeric or non-finite value,
                or a value whose area cannot be represented
        """
        try:
            field = DimensionField(field)
        except ValueError:
            raise QuoteValidationError(
                f"Unknown dimension '{field}'. Use 'width' or 'height'.",
                details={"field": str(field)}
            )

        if isinstance(value, bool):
            raise QuoteValidationError("Dimension must be a number.", details={"field": field.value})
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise QuoteValidationError("Dimension must be a number.", details={"field": field.value})
        if not math.isfinite(number):
            raise QuoteValidationError("Dimension must be finite.", details={"field": field.value})

        # The area must stay representable for pricing
        other = self.quote.height if field == DimensionField.WIDTH else self.quote.width
        if not math.isfinite(number * other / 10000):
            raise QuoteValidationError(
                "Dimension is too large.",
                details={"field": field.value, "value": number}
            )

        setattr(self.quote, field.value, number)
        logger.debug("dimension_set", field=field.value, value=number)

    def restart(self) -> None:
        """Start a new quote from the first step."""
        self.quote = new_quote()
        self._current_step_index = 0
        logger.info("quote_restarted")
