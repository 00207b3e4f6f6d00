"""
Unit tests for OrderService, CatalogService and the money helpers.

Run: pytest tests/unit/test_order_service.py -v
"""

from decimal import Decimal

import pytest

from models.order import OrderLineCreate, OrderTotals
from services.catalog_service import CatalogService
from services.order_service import (
    OrderService,
    add_line_to_totals,
    line_tax,
    line_total,
    to_money,
)
from exceptions import CatalogItemNotFoundError, DatabaseError, OrderNotFoundError
from tests.factories import OrderFactory


class TestMoneyHelpers:
    """Tests for the Decimal money helpers."""

    def test_to_money_rounds_half_up(self):
        assert to_money("2.345") == Decimal("2.35")
        assert to_money("2.344") == Decimal("2.34")

    def test_line_total(self):
        assert line_total(Decimal("5.00"), 3) == Decimal("15.00")

    def test_explicit_zero_rate_is_kept(self):
        """A 0% item is not taxed at the default rate."""
        assert line_tax(Decimal("100"), Decimal("0"), Decimal("10")) == Decimal("0.00")

    def test_missing_rate_uses_default(self):
        assert line_tax(Decimal("100"), None, Decimal("10")) == Decimal("10.00")

    def test_add_line_to_totals(self):
        """Adding 10.00 at 10% to 100/10/110 gives 110/11/121."""
        totals = OrderTotals(subtotal=Decimal("100.00"), tax=Decimal("10.00"), total=Decimal("110.00"))

        result = add_line_to_totals(totals, Decimal("10.00"), Decimal("10"), Decimal("10"))

        assert result.subtotal == Decimal("110.00")
        assert result.tax == Decimal("11.00")
        assert result.total == Decimal("121.00")


class TestCatalogService:
    """Tests for CatalogService reads."""

    def test_get_active_items_filters_status_and_tenant(self, seeded_db):
        service = CatalogService()

        items = service.get_active_items("tenant-1")

        assert [item.id for item in items] == ["item-1", "item-2", "item-3"]

    def test_get_item_any_status(self, seeded_db):
        service = CatalogService()

        item = service.get_item("item-4")

        assert item.name == "Retired Widget"
        assert item.is_active is False

    def test_get_item_missing_raises(self, seeded_db):
        service = CatalogService()

        with pytest.raises(CatalogItemNotFoundError):
            service.get_item("nope")

    def test_customer_directory_only_customers(self, seeded_db):
        """Staff users are not part of the directory."""
        service = CatalogService()

        customers = service.get_customer_directory("tenant-1")

        assert [c.id for c in customers] == ["cust-1", "cust-2"]

    def test_read_failure_raises_database_error(self, seeded_db):
        seeded_db.fail_on("items", "select", "timeout")
        service = CatalogService()

        with pytest.raises(DatabaseError):
            service.get_active_items("tenant-1")


class TestOrderServiceReads:
    """Tests for OrderService.get_order()"""

    def test_get_order(self, mock_db):
        mock_db.set_table_data("orders", [OrderFactory.create(id="order-1", subtotal=100, tax=10, total=110)])
        service = OrderService()

        order = service.get_order("order-1")

        assert order.totals.total == Decimal("110")

    def test_null_totals_read_as_zero(self, mock_db):
        row = OrderFactory.create(id="order-1")
        row.update({"subtotal": None, "tax": None, "total": None})
        mock_db.set_table_data("orders", [row])
        service = OrderService()

        order = service.get_order("order-1")

        assert order.subtotal == Decimal("0")

    def test_missing_order_raises(self, mock_db):
        service = OrderService()

        with pytest.raises(OrderNotFoundError):
            service.get_order("missing")


class TestOrderServiceWrites:
    """Tests for order writes."""

    def _line(self, order_id="order-1"):
        return OrderLineCreate(
            order_id=order_id,
            tenant_id="tenant-1",
            procurement_item_id="item-1",
            name="Widget A",
            quantity=2,
            unit_price=Decimal("5.00"),
            total=Decimal("10.00"),
        )

    def test_insert_order_line(self, mock_db):
        service = OrderService()

        line_id = service.insert_order_line(self._line())

        rows = mock_db.get_table_data("order_items")
        assert rows[0]["id"] == line_id
        assert rows[0]["procurement_item_id"] == "item-1"
        assert rows[0]["unit"] == "each"
        assert rows[0]["total"] == 10.0

    def test_delete_order_line(self, mock_db):
        service = OrderService()
        kept_id = service.insert_order_line(self._line())
        line_id = service.insert_order_line(self._line())

        service.delete_order_line(line_id)

        assert [row["id"] for row in mock_db.get_table_data("order_items")] == [kept_id]

    def test_update_totals_and_notes(self, mock_db):
        mock_db.set_table_data("orders", [OrderFactory.create(id="order-1", notes="old")])
        service = OrderService()

        service.update_order_totals("order-1", OrderTotals(
            subtotal=Decimal("10.00"), tax=Decimal("1.00"), total=Decimal("11.00")
        ))
        service.update_order_notes("order-1", None)

        row = mock_db.get_table_data("orders")[0]
        assert row["total"] == 11.0
        assert row["notes"] is None

    def test_create_order_with_lines(self, mock_db):
        service = OrderService()

        order = service.create_order_with_lines(
            {"tenant_id": "tenant-1", "order_number": "PO-1", "status": "approved"},
            [self._line(order_id=None)],
        )

        lines = mock_db.get_table_data("order_items")
        assert lines[0]["order_id"] == order.id
        assert order.order_number == "PO-1"

    def test_line_failure_deletes_order(self, mock_db):
        """If lines can't be written the order row is removed again."""
        mock_db.fail_on("order_items", "insert", "constraint violation")
        service = OrderService()

        with pytest.raises(DatabaseError):
            service.create_order_with_lines(
                {"tenant_id": "tenant-1", "order_number": "PO-1"},
                [self._line(order_id=None)],
            )

        assert mock_db.get_table_data("orders") == []
