"""
CSV order parser.

Parses order exports from the external ordering channel. Expected row shape
(no header required, a header row is tolerated):

    Date, OrderNumber, CustomerName, Barcode, <ignored>, ProductName, Quantity, <ignored...>

Date is DD/MM/YYYY or YYYY-MM-DD. Fields may be quoted to embed the delimiter.
Malformed rows are dropped, never kept as partial records.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from utils.text_utils import normalize_date

logger = structlog.get_logger(__name__)

# Column positions
COL_DATE = 0
COL_ORDER_NUMBER = 1
COL_CUSTOMER = 2
COL_BARCODE = 3
COL_PRODUCT = 5
COL_QUANTITY = 6
MIN_FIELDS = 7

DATE_HEADERS = {"date"}
ORDER_NUMBER_HEADERS = {"ordernumber", "order number"}


@dataclass
class ParsedOrderLine:
    """One valid order line."""
    line_index: int
    date: str
    order_number: str
    customer_name: str
    barcode: str
    product_name: str
    quantity: int


@dataclass
class SkippedRow:
    """A row that was dropped during parsing (non-fatal)."""
    row: int
    reason: str


@dataclass
class OrderCSVParseResult:
    """Result of parsing an order CSV."""
    lines: list[ParsedOrderLine] = field(default_factory=list)
    order_number: str = ""
    customer_name: str = ""
    date: str = ""
    error: Optional[str] = None
    skipped_rows: list[SkippedRow] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if at least one valid line was found."""
        return self.error is None and len(self.lines) > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "success": self.success,
            "lines": [
                {
                    "line_index": line.line_index,
                    "date": line.date,
                    "order_number": line.order_number,
                    "customer_name": line.customer_name,
                    "barcode": line.barcode,
                    "product_name": line.product_name,
                    "quantity": line.quantity,
                }
                for line in self.lines
            ],
            "order_number": self.order_number,
            "customer_name": self.customer_name,
            "date": self.date,
            "error": self.error,
            "skipped_rows": [
                {"row": s.row, "reason": s.reason}
                for s in self.skipped_rows
            ],
        }


def parse_order_csv(content: Optional[str], delimiter: str = ",") -> OrderCSVParseResult:
    """
    Parse CSV text into order lines.

    Order-level fields (order number, customer name, date) come from the
    first valid line that has them and are not overwritten later.

    Args:
        content: Raw CSV text
        delimiter: Field delimiter

    Returns:
        OrderCSVParseResult; success is False with an error message and
        no lines when nothing valid was found
    """
    if not content or not content.strip():
        return OrderCSVParseResult(error="Empty CSV file")

    raw_lines = content.strip().splitlines()
    logger.info("parsing_order_csv", row_count=len(raw_lines))

    result = OrderCSVParseResult()

    for index, raw in enumerate(raw_lines):
        line = raw.strip()
        if not line or _is_empty_row(line, delimiter):
            continue

        columns = _split_fields(line, delimiter)
        if len(columns) < MIN_FIELDS:
            result.skipped_rows.append(SkippedRow(index, f"expected {MIN_FIELDS} fields, got {len(columns)}"))
            continue

        date_col = columns[COL_DATE].strip()
        order_col = columns[COL_ORDER_NUMBER].strip()
        if date_col.lower() in DATE_HEADERS or order_col.lower() in ORDER_NUMBER_HEADERS:
            continue

        quantity = _parse_quantity(columns[COL_QUANTITY])
        if quantity is None or quantity <= 0:
            result.skipped_rows.append(SkippedRow(index, f"invalid quantity: {columns[COL_QUANTITY]!r}"))
            continue

        customer_col = columns[COL_CUSTOMER].strip()
        line_date = normalize_date(date_col)

        if not result.order_number and order_col:
            result.order_number = order_col
        if not result.customer_name and customer_col:
            result.customer_name = customer_col
        if not result.date and date_col:
            result.date = line_date

        result.lines.append(ParsedOrderLine(
            line_index=index,
            date=line_date,
            order_number=order_col,
            customer_name=customer_col,
            barcode="".join(columns[COL_BARCODE].split()),
            product_name=columns[COL_PRODUCT].strip(),
            quantity=quantity,
        ))

    if not result.lines:
        logger.warning(
            "order_csv_no_valid_lines",
            skipped_rows=len(result.skipped_rows)
        )
        return OrderCSVParseResult(
            error="No valid order lines found in CSV",
            skipped_rows=result.skipped_rows,
        )

    logger.info(
        "order_csv_parsed",
        lines_count=len(result.lines),
        skipped_rows=len(result.skipped_rows),
        order_number=result.order_number
    )

    return result


def _is_empty_row(line: str, delimiter: str) -> bool:
    """True for rows made only of delimiters and whitespace, e.g. ',,,,,,,'."""
    return not line.replace(delimiter, "").strip()


def _split_fields(line: str, delimiter: str) -> list[str]:
    """
    Split one row into fields.

    A double quote toggles "inside quotes"; delimiters inside quotes are
    kept as text. Quote characters themselves are dropped.
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def _parse_quantity(value: str) -> Optional[int]:
    """Whole-number quantity, or None. Spreadsheet exports may write '10.0'."""
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None
