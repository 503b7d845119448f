"""
Quote API routes.

Dimensions, selections and wizard navigation for the current session.
Every mutating route answers with the updated quote summary.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.quote import DimensionField, DimensionUpdate, QuoteSummary, SelectionRequest
from models.wizard import StepOutcome
from services.session_service import get_configurator_session
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/quote", tags=["Quote"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def outcome_response(outcome: StepOutcome) -> JSONResponse | StepOutcome:
    """Failed steps answer 422 with the outcome as body."""
    if outcome.ok:
        return outcome
    return JSONResponse(
        status_code=outcome.error.status_code,
        content=outcome.model_dump(mode="json")
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=QuoteSummary)
async def get_quote():
    """
    Current quote summary.

    Includes selections, itemized price, total and preview parameters.
    """
    try:
        return get_configurator_session().summary()
    except Exception as e:
        return handle_error(e)


@router.put("/dimensions/{field}", response_model=QuoteSummary)
async def set_dimension(field: DimensionField, data: DimensionUpdate):
    """
    Set width or height (cm).

    Values are not range-checked here; the dimensions step checks them
    when advancing.
    """
    try:
        session = get_configurator_session()
        session.set_dimension(field, data.value)
        return session.summary()
    except Exception as e:
        return handle_error(e)


@router.post("/selections/{category_id}", response_model=QuoteSummary)
async def select_option(category_id: str, data: SelectionRequest):
    """
    Select an option of a category.

    Raises:
        404: Category or option not found
    """
    try:
        session = get_configurator_session()
        session.select_option(category_id, data.option_id)
        return session.summary()
    except Exception as e:
        return handle_error(e)


@router.post("/advance", response_model=StepOutcome)
async def advance_step():
    """
    Validate the current step and move forward.

    On the last step a valid quote is reported as completed.

    Raises:
        422: Current step is not complete
    """
    try:
        return outcome_response(get_configurator_session().advance_step())
    except Exception as e:
        return handle_error(e)


@router.post("/retreat", response_model=StepOutcome)
async def retreat_step():
    """Go back one step (no-op on the first step)."""
    try:
        return get_configurator_session().retreat_step()
    except Exception as e:
        return handle_error(e)


@router.post("/restart", response_model=QuoteSummary)
async def restart_quote():
    """Discard the current quote and start again from the first step."""
    try:
        session = get_configurator_session()
        session.restart_quote()
        return session.summary()
    except Exception as e:
        return handle_error(e)
