"""
Order and order line schemas.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from models.base import BaseSchema


class OrderStatus(str, Enum):
    """Order lifecycle status."""
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    SENT = "sent"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderTotals(BaseSchema):
    """Money totals stored on an order row."""

    subtotal: Decimal = Field(default=Decimal("0"))
    tax: Decimal = Field(default=Decimal("0"))
    total: Decimal = Field(default=Decimal("0"))


class OrderLineCreate(BaseSchema):
    """
    A line to insert into `order_items`.

    Price is captured from the catalog item at the time of insertion.
    """

    order_id: Optional[str] = None
    tenant_id: str
    procurement_item_id: str
    name: str
    quantity: int = Field(..., gt=0)
    unit: str = "each"
    unit_price: Decimal = Field(..., ge=0)
    total: Decimal = Field(..., ge=0)


class OrderRecord(BaseSchema):
    """An `orders` row as read back from storage."""

    id: str
    tenant_id: str
    order_number: Optional[str] = None
    order_date: Optional[date] = None
    status: OrderStatus = OrderStatus.PENDING_APPROVAL
    created_by: Optional[str] = None
    subtotal: Decimal = Field(default=Decimal("0"))
    tax: Decimal = Field(default=Decimal("0"))
    total: Decimal = Field(default=Decimal("0"))
    notes: Optional[str] = None

    @field_validator("subtotal", "tax", "total", mode="before")
    @classmethod
    def missing_money_is_zero(cls, v):
        """Legacy rows store NULL totals."""
        return Decimal("0") if v is None else v

    @property
    def totals(self) -> OrderTotals:
        return OrderTotals(subtotal=self.subtotal, tax=self.tax, total=self.total)
