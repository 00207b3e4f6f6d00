"""
Item name alias schemas.

An alias remembers that a free-text product name, as it arrived from an
external order, means a specific catalog item for one tenant.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


class AliasCreate(BaseSchema):
    """Remember a confirmed name -> item association."""

    tenant_id: str = Field(..., min_length=1)
    item_id: str = Field(..., min_length=1)
    original_name: str = Field(
        ...,
        min_length=1,
        description="Name exactly as it appeared in the order",
        examples=["Widget B 500g"]
    )


class ItemAlias(BaseSchema):
    """
    Stored alias row.

    (tenant_id, alias_name) is unique; a second upsert for the same
    normalized name re-points the alias at the new item.
    """

    id: Optional[str] = None
    tenant_id: str
    item_id: str
    alias_name: str = Field(..., description="Normalized name used for lookup")
    original_name: Optional[str] = Field(None, description="Unnormalized source text")
    created_at: Optional[datetime] = None


class AliasListResponse(BaseSchema):
    """Aliases for one tenant."""

    data: list[ItemAlias]
    total: int
