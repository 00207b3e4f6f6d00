"""
CSV order import schemas.

An import is previewed first (parse + match, no writes), optionally
edited by the user, then submitted as one batch.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import Field, computed_field

from models.base import BaseSchema
from models.catalog import CatalogItem, CustomerRecord
from models.matching import CustomerMatchResult, ProductMatchResult
from models.order import OrderRecord


class ImportPolicy(str, Enum):
    """What to do with kept lines that still have no catalog item."""
    REJECT = "reject"
    DEFER = "defer"


class ImportLine(BaseSchema):
    """One parsed CSV line with its match and the user's decision."""

    line_index: int
    barcode: str = ""
    product_name: str = ""
    quantity: int = Field(..., gt=0)
    match: ProductMatchResult
    selected_item: Optional[CatalogItem] = None
    removed: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.selected_item is not None


class ImportPreview(BaseSchema):
    """Everything the user reviews before an import is written."""

    tenant_id: str
    order_number: str = ""
    order_date: Optional[date] = None
    customer_name: str = ""
    customer_match: CustomerMatchResult
    selected_customer: Optional[CustomerRecord] = None
    lines: list[ImportLine] = Field(default_factory=list)

    @property
    def active_lines(self) -> list[ImportLine]:
        return [line for line in self.lines if not line.removed]

    @property
    def unresolved_line_indexes(self) -> list[int]:
        return [line.line_index for line in self.active_lines if not line.is_resolved]

    @computed_field
    @property
    def unmatched_count(self) -> int:
        return len(self.unresolved_line_indexes)

    @computed_field
    @property
    def can_submit(self) -> bool:
        if self.selected_customer is None:
            return False
        active = self.active_lines
        return bool(active) and all(line.is_resolved for line in active)


class ImportPreviewRequest(BaseSchema):
    """Raw CSV text to preview."""

    tenant_id: str = Field(..., min_length=1)
    csv_text: str


class ImportSubmitRequest(BaseSchema):
    """A reviewed preview to write."""

    preview: ImportPreview
    policy: ImportPolicy = ImportPolicy.REJECT


class ImportSubmitResponse(BaseSchema):
    """Created order summary."""

    order: OrderRecord
    line_count: int
    deferred_count: int = 0
