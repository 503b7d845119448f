"""
Catalog API routes.

Read the catalog, import a supplier PDF and restore the built-in catalog.
"""

from fastapi import APIRouter, File, Query, UploadFile
from fastapi.responses import JSONResponse
import structlog

from models.base import MessageResponse
from models.catalog import Category, CategoryListResponse
from models.catalog_import import ImportResult, ImportStatusResponse
from services.session_service import get_configurator_session
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["Catalog"])


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


# ===================
# ROUTES
# ===================

@router.get("", response_model=CategoryListResponse)
async def list_categories():
    """List all categories with their options in display order."""
    try:
        categories = get_configurator_session().catalog()
        return CategoryListResponse(data=categories, total=len(categories))
    except Exception as e:
        return handle_error(e)


@router.get("/import/status", response_model=ImportStatusResponse)
async def import_status():
    """Current import status (idle, reading, analyzing, success, error)."""
    try:
        return get_configurator_session().import_status()
    except Exception as e:
        return handle_error(e)


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str):
    """
    Get one category.

    Raises:
        404: Category not found
    """
    try:
        return get_configurator_session().get_category(category_id)
    except Exception as e:
        return handle_error(e)


@router.post("/import", response_model=ImportResult)
async def import_catalog(file: UploadFile = File(...)):
    """
    Import a supplier catalog PDF.

    Frames are added to "material", sashes to "opening".

    Raises:
        400: Not a PDF, empty or too large
        409: Another import is running
        422: No usable rows found
        503: Extraction service failure
    """
    logger.info(
        "catalog_upload_received",
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        content = await file.read()
        result = await get_configurator_session().import_catalog(
            content,
            filename=file.filename,
            content_type=file.content_type,
        )
    except Exception as e:
        return handle_error(e)

    if not result.success:
        return JSONResponse(
            status_code=result.error.status_code if result.error else 500,
            content=result.model_dump(mode="json")
        )
    return result


@router.post("/reset", response_model=MessageResponse)
async def reset_catalog(
    confirm: bool = Query(False, description="Must be true: imported products are lost")
):
    """
    Restore the built-in catalog.

    Without confirm=true nothing changes.
    """
    try:
        if not get_configurator_session().reset_catalog(confirm=confirm):
            return JSONResponse(
                status_code=400,
                content=MessageResponse(
                    success=False,
                    message="Reset not confirmed. Pass confirm=true to discard imported products."
                ).model_dump(mode="json")
            )
        return MessageResponse(message="Catalog restored to the built-in products.")
    except Exception as e:
        return handle_error(e)
