"""
Unit tests for WizardController.

Run: pytest tests/unit/test_wizard_service.py -v
"""

import pytest

from config.catalog_defaults import COLOR, GLASS, MATERIAL, OPENING, WIZARD_STEPS
from models.quote import DimensionField, QuoteState
from models.wizard import StepType, WizardStep
from services.wizard_service import WizardController, new_quote
from exceptions import QuoteValidationError
from tests.factories import OptionFactory


def complete_quote(controller: WizardController) -> None:
    for category_id in (MATERIAL, OPENING, GLASS, COLOR):
        controller.select(category_id, OptionFactory.create(id=f"{category_id}-choice"))


class TestWizardControllerInit:
    """Tests for initial state."""

    def test_starts_on_first_step(self, store):
        """Should start on the dimensions step with default sizes."""
        controller = WizardController(store)

        assert controller.current_step_index == 0
        assert controller.current_step.id == "dimensions"
        assert controller.quote.width == 120
        assert controller.quote.height == 140
        assert controller.quote.selections == {}

    def test_step_count_matches_steps(self, store):
        controller = WizardController(store)

        assert controller.step_count == len(WIZARD_STEPS) == 5

    def test_empty_steps_rejected(self, store):
        with pytest.raises(ValueError):
            WizardController(store, steps=[])

    def test_selection_step_requires_category(self):
        """Should not build a selection step without a category."""
        with pytest.raises(ValueError):
            WizardStep(id="broken", type=StepType.SELECTION, title="Broken")

    def test_new_quote_is_independent(self):
        first = new_quote()
        first.selections["material"] = OptionFactory.create()

        assert new_quote().selections == {}


class TestWizardControllerValidation:
    """Tests for validate_step()"""

    @pytest.mark.parametrize("width,height", [(29, 100), (100, 29), (0, 0), (-10, 50)])
    def test_dimensions_below_minimum_invalid(self, store, width, height):
        controller = WizardController(store)
        controller.set_dimension("width", width)
        controller.set_dimension("height", height)

        error = controller.validate_step(controller.current_step)

        assert isinstance(error, QuoteValidationError)
        assert error.details["step_id"] == "dimensions"

    def test_dimensions_at_minimum_valid(self, store):
        controller = WizardController(store)
        controller.set_dimension("width", 30)
        controller.set_dimension("height", 30)

        assert controller.validate_step(controller.current_step) is None

    def test_nan_dimension_invalid(self, store):
        """A NaN quote built directly must still fail the dimensions step."""
        controller = WizardController(store, quote=QuoteState(width=float("nan"), height=100))

        assert controller.validate_step(controller.current_step) is not None

    def test_selection_step_needs_selection(self, store):
        controller = WizardController(store)
        step = WIZARD_STEPS[1]

        assert controller.validate_step(step) is not None

        controller.select(step.category_id, OptionFactory.create())

        assert controller.validate_step(step) is None

    def test_custom_minimum(self, store):
        controller = WizardController(store, min_dimension_cm=50)
        controller.set_dimension("width", 40)

        assert controller.validate_step(controller.current_step) is not None


class TestWizardControllerNavigation:
    """Tests for advance() and retreat()"""

    def test_advance_moves_forward(self, store):
        controller = WizardController(store)

        outcome = controller.advance()

        assert outcome.ok is True
        assert outcome.completed is False
        assert outcome.step_index == 1
        assert outcome.step_id == MATERIAL
        assert controller.current_step_index == 1

    def test_advance_blocked_without_selection(self, store):
        """Should report the failure in the outcome and stay put."""
        controller = WizardController(store)
        controller.advance()

        outcome = controller.advance()

        assert outcome.ok is False
        assert outcome.step_index == 1
        assert outcome.error.code == "QUOTE_VALIDATION_ERROR"
        assert outcome.error.status_code == 422
        assert controller.current_step_index == 1

    def test_advance_blocked_by_invalid_dimensions(self, store):
        controller = WizardController(store)
        controller.set_dimension(DimensionField.HEIGHT, 10)

        outcome = controller.advance()

        assert outcome.ok is False
        assert "min 30 cm" in outcome.error.message
        assert controller.current_step_index == 0

    def test_last_step_completes_without_moving(self, store):
        """Should fire the completion listeners and keep the index on the last step."""
        controller = WizardController(store)
        complete_quote(controller)
        completed = []
        controller.on_complete(completed.append)

        for _ in range(4):
            assert controller.advance().ok
        outcome = controller.advance()

        assert outcome.ok is True
        assert outcome.completed is True
        assert controller.current_step_index == 4
        assert completed == [controller.quote]

    def test_completion_is_repeatable(self, store):
        controller = WizardController(store)
        complete_quote(controller)
        for _ in range(4):
            controller.advance()

        assert controller.advance().completed is True
        assert controller.advance().completed is True
        assert controller.current_step_index == 4

    def test_retreat_on_first_step_is_noop(self, store):
        controller = WizardController(store)

        outcome = controller.retreat()

        assert outcome.ok is True
        assert outcome.step_index == 0

    def test_retreat_never_invalidates(self, store):
        """Going back is always allowed, even with an incomplete quote."""
        controller = WizardController(store)
        controller.advance()
        controller.set_dimension("width", 1)

        outcome = controller.retreat()

        assert outcome.ok is True
        assert controller.current_step_index == 0

    def test_index_stays_in_bounds(self, store):
        controller = WizardController(store)
        complete_quote(controller)

        for _ in range(20):
            controller.advance()
            assert 0 <= controller.current_step_index < controller.step_count
        for _ in range(20):
            controller.retreat()
            assert 0 <= controller.current_step_index < controller.step_count

    def test_progress_percent(self, store):
        controller = WizardController(store)

        assert controller.progress_percent == 20.0
        controller.advance()
        assert controller.progress_percent == 40.0

    def test_current_category_reads_live_store(self, store):
        controller = WizardController(store)
        assert controller.current_category() is None

        controller.advance()
        store.merge_import(MATERIAL, [OptionFactory.create(id="fresh")])

        assert controller.current_category().options[0].id == "fresh"


class TestWizardControllerMutations:
    """Tests for select(), set_dimension() and restart()"""

    def test_select_overwrites(self, store):
        controller = WizardController(store)
        controller.select(MATERIAL, OptionFactory.create(id="first"))
        controller.select(MATERIAL, OptionFactory.create(id="second"))

        assert controller.quote.selections[MATERIAL].id == "second"

    def test_select_allowed_from_any_step(self, store):
        controller = WizardController(store)

        controller.select(COLOR, OptionFactory.create(id="oak"))

        assert controller.current_step_index == 0
        assert controller.quote.selections[COLOR].id == "oak"

    def test_clear_selection(self, store):
        controller = WizardController(store)
        controller.select(GLASS, OptionFactory.create(id="double"))

        removed = controller.clear_selection(GLASS)

        assert removed.id == "double"
        assert GLASS not in controller.quote.selections
        assert controller.clear_selection(GLASS) is None

    def test_set_dimension_accepts_any_finite_number(self, store):
        """Out-of-range values are stored; the step check rejects them later."""
        controller = WizardController(store)

        controller.set_dimension("width", 5)
        controller.set_dimension("height", 900.5)

        assert controller.quote.width == 5
        assert controller.quote.height == 900.5

    def test_set_dimension_unknown_field(self, store):
        controller = WizardController(store)

        with pytest.raises(QuoteValidationError) as exc_info:
            controller.set_dimension("depth", 10)

        assert exc_info.value.details["field"] == "depth"

    @pytest.mark.parametrize("value", ["abc", None, True, float("inf"), float("-inf"), float("nan"), "nan"])
    def test_set_dimension_rejects_non_numbers(self, store, value):
        controller = WizardController(store)

        with pytest.raises(QuoteValidationError):
            controller.set_dimension("width", value)

        assert controller.quote.width == 120

    def test_restart(self, store):
        controller = WizardController(store)
        complete_quote(controller)
        controller.set_dimension("width", 300)
        controller.advance()

        controller.restart()

        assert controller.current_step_index == 0
        assert controller.quote.width == 120
        assert controller.quote.selections == {}

    def test_set_dimension_rejects_overflowing_area(self, store):
        """A finite value whose area overflows is refused and the quote kept."""
        controller = WizardController(store)
        controller.set_dimension("width", 1e308)

        with pytest.raises(QuoteValidationError) as exc_info:
            controller.set_dimension("height", 1e308)

        assert exc_info.value.message == "Dimension is too large."
        assert controller.quote.height == 140
