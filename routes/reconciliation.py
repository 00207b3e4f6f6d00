"""
Reconciliation API routes.

The client keeps the session between calls and sends it back with each
step; a failed step returns an error and the client retries with the
session it already has.
"""

from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.matching import ItemSuggestion
from models.reconciliation import (
    CloseResult,
    ReconciliationSession,
    SelectMatchRequest,
    SessionRequest,
    StepResult,
)
from services.reconciliation_service import get_reconciliation_service
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
# SESSION ROUTES
# ===================

@router.post("/orders/{order_id}/session", response_model=ReconciliationSession)
async def open_session(order_id: str):
    """
    Open a session over the order's unmatched items.

    Raises:
        404: Order not found
        422: Notes hold no unmatched items
    """
    try:
        service = get_reconciliation_service()
        return service.open_session(order_id)

    except Exception as e:
        return handle_error(e)


@router.post("/select", response_model=StepResult)
async def select_match(data: SelectMatchRequest):
    """
    Confirm a catalog item for the current unmatched item.

    Raises:
        404: Catalog item not found
        409: Session has no remaining items
        422: Item is not usable
        500: A write failed; retry with the same session
    """
    try:
        service = get_reconciliation_service()
        return service.select_match(data.session, data.item_id, data.remember_alias)

    except Exception as e:
        return handle_error(e)


@router.post("/skip", response_model=StepResult)
async def skip_item(data: SessionRequest):
    """Skip the current unmatched item."""
    try:
        service = get_reconciliation_service()
        return service.skip(data.session)

    except Exception as e:
        return handle_error(e)


@router.post("/close", response_model=CloseResult)
async def close_session(data: SessionRequest):
    """Clean up the order notes and end the session."""
    try:
        service = get_reconciliation_service()
        return service.close_session(data.session)

    except Exception as e:
        return handle_error(e)


# ===================
# UTILITY ROUTES
# ===================

@router.get("/suggestions", response_model=list[ItemSuggestion])
async def get_suggestions(
    tenant_id: str = Query(..., description="Tenant UUID"),
    name: str = Query(..., min_length=1, description="Unmatched product name"),
    limit: Optional[int] = Query(10, ge=1, le=100, description="Max suggestions"),
    show_all: bool = Query(False, description="Include weak candidates")
):
    """Ranked catalog candidates for an unmatched name."""
    try:
        service = get_reconciliation_service()
        return service.get_suggestions(tenant_id, name, limit=limit, show_all=show_all)

    except Exception as e:
        return handle_error(e)
