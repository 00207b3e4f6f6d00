"""
Order persistence and money arithmetic.

Totals are Decimal, rounded half-up to cents. A line's tax is
`line_total * tax_rate / 100`; items without a tax rate use the
configured default, while an explicit rate of 0 stays 0.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import structlog

from config import get_supabase_client
from models.order import OrderLineCreate, OrderRecord, OrderTotals
from exceptions import DatabaseError, OrderNotFoundError

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


# ===================
# MONEY HELPERS
# ===================

def to_money(value) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return to_money(Decimal(unit_price) * quantity)


def line_tax(total: Decimal, tax_rate: Optional[Decimal], default_tax_rate: Decimal) -> Decimal:
    rate = default_tax_rate if tax_rate is None else tax_rate
    return to_money(Decimal(total) * Decimal(rate) / 100)


def add_line_to_totals(
    totals: OrderTotals,
    total: Decimal,
    tax_rate: Optional[Decimal],
    default_tax_rate: Decimal
) -> OrderTotals:
    """
    Add one line to running order totals.

    Args:
        totals: Current order totals
        total: The new line's total
        tax_rate: The item's tax rate in percent, or None for the default
        default_tax_rate: Fallback rate in percent

    Returns:
        New OrderTotals; total is always subtotal + tax
    """
    subtotal = to_money(totals.subtotal + total)
    tax = to_money(totals.tax + line_tax(total, tax_rate, default_tax_rate))
    return OrderTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def _line_payload(line: OrderLineCreate) -> dict:
    return {
        "order_id": line.order_id,
        "tenant_id": line.tenant_id,
        "procurement_item_id": line.procurement_item_id,
        "name": line.name,
        "quantity": line.quantity,
        "unit": line.unit,
        "unit_price": float(line.unit_price),
        "total": float(line.total),
    }


class OrderService:
    """
    Reads and writes `orders` and `order_items`.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "orders"
        self.lines_table = "order_items"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_order(self, order_id: str) -> OrderRecord:
        """
        Get an order by ID.

        Raises:
            OrderNotFoundError: If the order doesn't exist
        """
        logger.debug("getting_order", order_id=order_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", order_id)
                .execute()
            )

            if not result.data:
                raise OrderNotFoundError(order_id)

            return OrderRecord(**result.data[0])

        except OrderNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "get_order_failed",
                order_id=order_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def insert_order_line(self, line: OrderLineCreate) -> Optional[str]:
        """
        Insert one order line.

        Returns:
            ID of the inserted row
        """
        logger.info(
            "inserting_order_line",
            order_id=line.order_id,
            item_id=line.procurement_item_id,
            quantity=line.quantity
        )

        try:
            result = (
                self.db.table(self.lines_table)
                .insert(_line_payload(line))
                .execute()
            )

            return result.data[0].get("id") if result.data else None

        except Exception as e:
            logger.error(
                "insert_order_line_failed",
                order_id=line.order_id,
                item_id=line.procurement_item_id,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

    def delete_order_line(self, line_id: str) -> None:
        """Delete one order line by ID."""
        logger.info("deleting_order_line", line_id=line_id)

        try:
            (
                self.db.table(self.lines_table)
                .delete()
                .eq("id", line_id)
                .execute()
            )

        except Exception as e:
            logger.error(
                "delete_order_line_failed",
                line_id=line_id,
                error=str(e)
            )
            raise DatabaseError("delete", str(e))

    def update_order_totals(self, order_id: str, totals: OrderTotals) -> None:
        """Overwrite the order's subtotal, tax and total."""
        logger.info(
            "updating_order_totals",
            order_id=order_id,
            subtotal=str(totals.subtotal),
            tax=str(totals.tax),
            total=str(totals.total)
        )

        try:
            (
                self.db.table(self.table)
                .update({
                    "subtotal": float(totals.subtotal),
                    "tax": float(totals.tax),
                    "total": float(totals.total),
                })
                .eq("id", order_id)
                .execute()
            )

        except Exception as e:
            logger.error(
                "update_order_totals_failed",
                order_id=order_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

    def update_order_notes(self, order_id: str, notes: Optional[str]) -> None:
        """Overwrite the order's notes (None clears them)."""
        logger.info("updating_order_notes", order_id=order_id, cleared=notes is None)

        try:
            (
                self.db.table(self.table)
                .update({"notes": notes})
                .eq("id", order_id)
                .execute()
            )

        except Exception as e:
            logger.error(
                "update_order_notes_failed",
                order_id=order_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

    def create_order_with_lines(
        self,
        order_data: dict,
        lines: list[OrderLineCreate]
    ) -> OrderRecord:
        """
        Create an order and its lines.

        If inserting the lines fails the order row is deleted again, so
        no order is left without its lines.

        Args:
            order_data: Column values for the `orders` row
            lines: Lines to attach; their order_id is filled in here

        Returns:
            The created OrderRecord
        """
        logger.info(
            "creating_order",
            order_number=order_data.get("order_number"),
            line_count=len(lines)
        )

        try:
            result = (
                self.db.table(self.table)
                .insert(order_data)
                .execute()
            )
            order = OrderRecord(**result.data[0])

        except Exception as e:
            logger.error(
                "create_order_failed",
                order_number=order_data.get("order_number"),
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

        if not lines:
            return order

        try:
            payload = [
                _line_payload(line.model_copy(update={"order_id": order.id}))
                for line in lines
            ]
            (
                self.db.table(self.lines_table)
                .insert(payload)
                .execute()
            )

        except Exception as e:
            logger.error(
                "create_order_lines_failed",
                order_id=order.id,
                error=str(e)
            )
            self._delete_order(order.id)
            raise DatabaseError("insert", str(e))

        logger.info(
            "order_created",
            order_id=order.id,
            order_number=order.order_number,
            line_count=len(lines)
        )

        return order

    def _delete_order(self, order_id: str) -> None:
        try:
            self.db.table(self.table).delete().eq("id", order_id).execute()
            logger.warning("order_rolled_back", order_id=order_id)
        except Exception as e:
            logger.error(
                "order_rollback_failed",
                order_id=order_id,
                error=str(e)
            )


# Singleton instance
_order_service: Optional[OrderService] = None


def get_order_service() -> OrderService:
    """Get or create OrderService instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service
