"""
Catalog and customer directory schemas.

Both are read-only snapshots as far as matching is concerned: the
matchers receive lists of these and never write them back.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


class ItemStatus(str, Enum):
    """Catalog item lifecycle status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SOLD_OUT = "sold_out"


class CatalogItem(BaseSchema):
    """
    A sellable catalog item.

    Maps a row of the `items` table.
    """

    id: str = Field(..., description="Item UUID")
    tenant_id: Optional[str] = Field(None, description="Owning tenant")
    name: str = Field(..., description="Display name")
    barcode: Optional[str] = Field(None, description="EAN/UPC barcode as stored")
    sku: Optional[str] = Field(None, description="Internal SKU")
    wholesale_price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Unit price charged to customers"
    )
    tax_rate: Optional[Decimal] = Field(
        None,
        ge=0,
        le=100,
        description="Tax rate in percent; tenant default applies when absent"
    )
    status: ItemStatus = Field(default=ItemStatus.ACTIVE)
    unit: Optional[str] = Field(None, description="Sale unit, e.g. 'each'")

    @property
    def is_active(self) -> bool:
        return self.status == ItemStatus.ACTIVE


class CustomerRecord(BaseSchema):
    """
    A customer in the tenant's directory.

    Maps a row of the `users` table with role `customer`.
    """

    id: str = Field(..., description="User UUID")
    tenant_id: Optional[str] = None
    email: Optional[str] = Field(None, description="Login email")
    business_name: Optional[str] = None
    contact_name: Optional[str] = None
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.business_name or self.full_name or self.contact_name or self.email or ""
