"""
CSV order import.

Two phases: preview parses the CSV and matches the customer and every
line against snapshots without writing anything; submit writes the
reviewed preview as one order with its lines.
"""

import time
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional
import structlog

from config.settings import settings
from models.catalog import CatalogItem, CustomerRecord
from models.matching import (
    DEFAULT_MATCHING_CONFIG,
    MatchConfidence,
    MatchingConfig,
    MatchTag,
    ProductMatchResult,
)
from models.order import OrderLineCreate, OrderStatus, OrderTotals
from models.order_import import (
    ImportLine,
    ImportPolicy,
    ImportPreview,
    ImportSubmitResponse,
)
from models.reconciliation import UnmatchedItemRecord
from exceptions import (
    CSVParseError,
    ImportCustomerRequiredError,
    InvalidSelectionError,
    UnresolvedImportLinesError,
    ValidationError,
)
from parsers.csv_order_parser import OrderCSVParseResult, parse_order_csv
from parsers.unmatched_notes_parser import append_unmatched_block
from services.alias_service import AliasService
from services.catalog_service import CatalogService
from services.customer_matcher import match_customer
from services.order_service import OrderService, add_line_to_totals, line_total
from services.product_matcher import match_product

logger = structlog.get_logger(__name__)

ORDER_NUMBER_PREFIX = "IMP-"
DEFAULT_UNIT = "each"


# ===================
# PREVIEW BUILDING
# ===================

def build_import_preview(
    parsed: OrderCSVParseResult,
    catalog: Iterable[CatalogItem],
    directory: Iterable[CustomerRecord],
    aliases: Optional[dict[str, str]] = None,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    tenant_id: str = ""
) -> ImportPreview:
    """
    Match a parsed CSV against catalog and directory snapshots.

    Each line starts out selecting its matched item, if any.
    """
    catalog = list(catalog)
    customer_match = match_customer(parsed.customer_name, directory, config)

    lines = []
    for parsed_line in parsed.lines:
        match = match_product(
            parsed_line.barcode,
            parsed_line.product_name,
            catalog,
            aliases=aliases,
            config=config,
        )
        lines.append(ImportLine(
            line_index=parsed_line.line_index,
            barcode=parsed_line.barcode,
            product_name=parsed_line.product_name,
            quantity=parsed_line.quantity,
            match=match,
            selected_item=match.item,
        ))

    return ImportPreview(
        tenant_id=tenant_id,
        order_number=parsed.order_number,
        order_date=_parse_iso_date(parsed.date),
        customer_name=parsed.customer_name,
        customer_match=customer_match,
        selected_customer=customer_match.customer,
        lines=lines,
    )


def _parse_iso_date(value: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning("import_date_invalid", value=value)
        return None


def _find_line(preview: ImportPreview, line_index: int) -> int:
    for position, line in enumerate(preview.lines):
        if line.line_index == line_index:
            return position
    raise ValidationError(
        f"No import line with index {line_index}",
        code="IMPORT_LINE_NOT_FOUND",
        details={"line_index": line_index}
    )


def _replace_line(preview: ImportPreview, line_index: int, **changes) -> ImportPreview:
    position = _find_line(preview, line_index)
    lines = list(preview.lines)
    lines[position] = lines[position].model_copy(update=changes)
    return preview.model_copy(update={"lines": lines})


# ===================
# PREVIEW EDITING
# ===================

def select_line_item(preview: ImportPreview, line_index: int, item: CatalogItem) -> ImportPreview:
    """
    Pick the catalog item for a line by hand.

    A hand-picked item counts as an exact match.
    """
    if not item.is_active:
        raise InvalidSelectionError("Catalog item is not active", item_id=item.id)

    line = preview.lines[_find_line(preview, line_index)]
    match = ProductMatchResult(
        barcode=line.barcode,
        product_name=line.product_name,
        item=item,
        confidence=MatchConfidence.EXACT,
        matched_by=line.match.matched_by or MatchTag.NAME,
    )
    return _replace_line(preview, line_index, selected_item=item, match=match)


def remove_line(preview: ImportPreview, line_index: int) -> ImportPreview:
    """Leave a line out of the import."""
    return _replace_line(preview, line_index, removed=True)


def restore_line(preview: ImportPreview, line_index: int) -> ImportPreview:
    return _replace_line(preview, line_index, removed=False)


def select_customer(preview: ImportPreview, customer: CustomerRecord) -> ImportPreview:
    return preview.model_copy(update={"selected_customer": customer})


def unmatched_count(preview: ImportPreview) -> int:
    return preview.unmatched_count


def can_submit(preview: ImportPreview) -> bool:
    return preview.can_submit


def _generated_order_number() -> str:
    return ORDER_NUMBER_PREFIX + str(int(time.time() * 1000))[-8:]


def _deferred_record(line: ImportLine) -> UnmatchedItemRecord:
    name = line.product_name or line.barcode or f"Line {line.line_index + 1}"
    return UnmatchedItemRecord(name=name, quantity=line.quantity, code=line.barcode or None)


# ===================
# SERVICE
# ===================

class OrderImportService:
    """
    Previews and submits CSV order imports for a tenant.
    """

    def __init__(
        self,
        catalog_service: Optional[CatalogService] = None,
        order_service: Optional[OrderService] = None,
        alias_service: Optional[AliasService] = None,
        config: Optional[MatchingConfig] = None,
        default_tax_rate: Optional[Decimal] = None
    ):
        self.catalog = catalog_service or CatalogService()
        self.orders = order_service or OrderService()
        self.aliases = alias_service or AliasService(catalog_service=self.catalog)
        self.config = config or settings.matching_config
        self.default_tax_rate = (
            default_tax_rate if default_tax_rate is not None
            else Decimal(str(settings.default_tax_rate))
        )

    def preview(self, csv_text: str, tenant_id: str) -> ImportPreview:
        """
        Parse and match a CSV without writing anything.

        Raises:
            CSVParseError: If the CSV has no valid lines
        """
        logger.info("previewing_import", tenant_id=tenant_id)

        parsed = parse_order_csv(csv_text)
        if not parsed.success:
            raise CSVParseError(
                parsed.error or "Could not parse CSV",
                details={"skipped_rows": len(parsed.skipped_rows)}
            )

        catalog = self.catalog.get_active_items(tenant_id)
        directory = self.catalog.get_customer_directory(tenant_id)
        aliases = self.aliases.get_alias_map(tenant_id)

        preview = build_import_preview(
            parsed,
            catalog,
            directory,
            aliases=aliases,
            config=self.config,
            tenant_id=tenant_id,
        )

        logger.info(
            "import_previewed",
            tenant_id=tenant_id,
            line_count=len(preview.lines),
            unmatched_count=preview.unmatched_count,
            customer_confidence=preview.customer_match.confidence.value
        )

        return preview

    def submit(
        self,
        preview: ImportPreview,
        policy: ImportPolicy = ImportPolicy.REJECT
    ) -> ImportSubmitResponse:
        """
        Write a reviewed preview as one order.

        Args:
            preview: The edited preview
            policy: REJECT refuses unresolved lines; DEFER writes them into
                the order notes for later reconciliation

        Returns:
            ImportSubmitResponse with the created order

        Raises:
            ImportCustomerRequiredError: If no customer is selected
            UnresolvedImportLinesError: If unresolved lines are refused, or
                nothing would be ordered
            DatabaseError: If the order or its lines could not be written
        """
        customer = preview.selected_customer
        if customer is None:
            raise ImportCustomerRequiredError(preview.customer_name)

        active = preview.active_lines
        if not active:
            raise ValidationError("No lines left to import", code="IMPORT_EMPTY")

        unresolved = [line for line in active if not line.is_resolved]
        if unresolved and policy == ImportPolicy.REJECT:
            raise UnresolvedImportLinesError([line.line_index for line in unresolved])

        resolved = [line for line in active if line.is_resolved]
        if not resolved:
            raise UnresolvedImportLinesError([line.line_index for line in unresolved])

        totals = OrderTotals()
        order_lines = []
        for line in resolved:
            item = line.selected_item
            order_line = OrderLineCreate(
                tenant_id=preview.tenant_id,
                procurement_item_id=item.id,
                name=item.name,
                quantity=line.quantity,
                unit=item.unit or DEFAULT_UNIT,
                unit_price=item.wholesale_price,
                total=line_total(item.wholesale_price, line.quantity),
            )
            totals = add_line_to_totals(totals, order_line.total, item.tax_rate, self.default_tax_rate)
            order_lines.append(order_line)

        notes = f"Imported from CSV for {customer.display_name}"
        if unresolved:
            notes = append_unmatched_block(notes, [_deferred_record(line) for line in unresolved])

        order_data = {
            "tenant_id": preview.tenant_id,
            "order_number": preview.order_number or _generated_order_number(),
            "order_date": (preview.order_date or date.today()).isoformat(),
            "status": (OrderStatus.PENDING_APPROVAL if unresolved else OrderStatus.APPROVED).value,
            "created_by": customer.id,
            "subtotal": float(totals.subtotal),
            "tax": float(totals.tax),
            "total": float(totals.total),
            "notes": notes,
        }

        order = self.orders.create_order_with_lines(order_data, order_lines)

        logger.info(
            "import_submitted",
            order_id=order.id,
            order_number=order.order_number,
            line_count=len(order_lines),
            deferred_count=len(unresolved)
        )

        return ImportSubmitResponse(
            order=order,
            line_count=len(order_lines),
            deferred_count=len(unresolved),
        )


# Singleton instance
_order_import_service: Optional[OrderImportService] = None


def get_order_import_service() -> OrderImportService:
    """Get or create OrderImportService instance."""
    global _order_import_service
    if _order_import_service is None:
        _order_import_service = OrderImportService()
    return _order_import_service
