"""
CSV order import API routes.

Preview first, then submit the reviewed preview.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.order_import import (
    ImportPreview,
    ImportPreviewRequest,
    ImportSubmitRequest,
    ImportSubmitResponse,
)
from services.order_import_service import get_order_import_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


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

@router.post("/preview", response_model=ImportPreview)
async def preview_import(data: ImportPreviewRequest):
    """
    Parse a CSV and match its customer and lines. Writes nothing.

    Raises:
        422: CSV has no valid order lines
    """
    try:
        service = get_order_import_service()
        return service.preview(data.csv_text, data.tenant_id)

    except Exception as e:
        return handle_error(e)


@router.post("/submit", response_model=ImportSubmitResponse, status_code=201)
async def submit_import(data: ImportSubmitRequest):
    """
    Create the order from a reviewed preview.

    Raises:
        422: No customer selected, or unresolved lines under the reject policy
        500: Order could not be written
    """
    try:
        service = get_order_import_service()
        return service.submit(data.preview, data.policy)

    except Exception as e:
        return handle_error(e)
