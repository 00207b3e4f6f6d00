"""
Item name alias API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.alias import AliasCreate, AliasListResponse, ItemAlias
from services.alias_service import get_alias_service
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

@router.get("", response_model=AliasListResponse)
async def list_aliases(tenant_id: str = Query(..., description="Tenant UUID")):
    """List the tenant's aliases."""
    try:
        service = get_alias_service()
        aliases = service.list_aliases(tenant_id)
        return AliasListResponse(data=aliases, total=len(aliases))

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ItemAlias, status_code=201)
async def create_alias(data: AliasCreate):
    """
    Remember a name for a catalog item.

    Re-posting the same name points the alias at the new item.

    Raises:
        404: Item not in the tenant's catalog
        422: Name is empty after normalization
    """
    try:
        service = get_alias_service()
        return service.create_alias(data.tenant_id, data.item_id, data.original_name)

    except Exception as e:
        return handle_error(e)


@router.delete("/{alias_id}", status_code=204)
async def delete_alias(
    alias_id: str,
    tenant_id: str = Query(..., description="Tenant UUID")
):
    """
    Delete an alias.

    Raises:
        404: Alias not found
    """
    try:
        service = get_alias_service()
        service.delete_alias(tenant_id, alias_id)
        return None  # 204 No Content

    except Exception as e:
        return handle_error(e)
