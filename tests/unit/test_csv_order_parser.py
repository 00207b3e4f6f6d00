"""
Unit tests for the CSV order parser.

Run: pytest tests/unit/test_csv_order_parser.py -v
"""

from parsers.csv_order_parser import parse_order_csv


HEADER = "Date,OrderNumber,Customer,Barcode,Ignored,Product,Quantity,Extra"


class TestParseOrderCsv:
    """Tests for parse_order_csv()"""

    def test_parses_lines_and_order_fields(self):
        """Order fields come from the first line; each valid row becomes a line."""
        content = "\n".join([
            "15/01/2026,PO-77,Acme Co,0001234,x,Widget A,4,",
            "15/01/2026,PO-77,Acme Co,998877,x,Gadget Large,2,",
        ])

        result = parse_order_csv(content)

        assert result.success is True
        assert result.order_number == "PO-77"
        assert result.customer_name == "Acme Co"
        assert result.date == "2026-01-15"
        assert [line.product_name for line in result.lines] == ["Widget A", "Gadget Large"]
        assert [line.quantity for line in result.lines] == [4, 2]

    def test_header_row_is_skipped(self):
        """A header row should be tolerated and not parsed as a line."""
        content = HEADER + "\n2026-01-15,PO-1,Acme,123,x,Widget,1,"

        result = parse_order_csv(content)

        assert len(result.lines) == 1
        assert result.lines[0].line_index == 1

    def test_quoted_field_keeps_delimiter(self):
        """A delimiter inside quotes is part of the field."""
        content = '2026-01-15,PO-1,"Acme, Inc",123,x,"Bolt, steel",3,'

        result = parse_order_csv(content)

        assert result.customer_name == "Acme, Inc"
        assert result.lines[0].product_name == "Bolt, steel"

    def test_invalid_rows_are_dropped(self):
        """Rows with too few fields or bad quantities are dropped, not kept partially."""
        content = "\n".join([
            "2026-01-15,PO-1,Acme,123,x,Widget,abc,",
            "2026-01-15,PO-1,Acme,123,x,Widget,0,",
            "2026-01-15,PO-1,Acme",
            ",,,,,,,",
            "",
            "2026-01-15,PO-1,Acme,123,x,Widget,5,",
        ])

        result = parse_order_csv(content)

        assert len(result.lines) == 1
        assert result.lines[0].quantity == 5
        assert len(result.skipped_rows) == 3

    def test_whole_number_float_quantity_accepted(self):
        """Spreadsheet-style '10.0' quantities should parse."""
        result = parse_order_csv("2026-01-15,PO-1,Acme,123,x,Widget,10.0,")

        assert result.lines[0].quantity == 10

    def test_barcode_whitespace_removed(self):
        result = parse_order_csv("2026-01-15,PO-1,Acme, 12 34 ,x,Widget,1,")

        assert result.lines[0].barcode == "1234"

    def test_first_non_empty_order_fields_win(self):
        """Later lines should not overwrite order-level fields."""
        content = "\n".join([
            "2026-01-15,,Acme,1,x,Widget,1,",
            "2026-02-20,PO-9,Other,2,x,Gadget,1,",
        ])

        result = parse_order_csv(content)

        assert result.order_number == "PO-9"
        assert result.customer_name == "Acme"
        assert result.date == "2026-01-15"

    def test_empty_input_fails(self):
        """Empty input should fail with an error and no lines."""
        result = parse_order_csv("   ")

        assert result.success is False
        assert result.error == "Empty CSV file"
        assert result.lines == []

    def test_no_valid_lines_fails(self):
        """Input with only invalid rows should fail."""
        result = parse_order_csv(HEADER + "\n2026-01-15,PO-1,Acme,123,x,Widget,-2,")

        assert result.success is False
        assert result.error == "No valid order lines found in CSV"
        assert result.lines == []

    def test_to_dict_shape(self):
        result = parse_order_csv("2026-01-15,PO-1,Acme,123,x,Widget,1,")

        data = result.to_dict()

        assert data["success"] is True
        assert data["lines"][0]["product_name"] == "Widget"
        assert data["error"] is None
