"""
Order text parsers module.

CSV order exports and the unmatched-items block kept in order notes.
"""

from parsers.csv_order_parser import (
    parse_order_csv,
    OrderCSVParseResult,
    ParsedOrderLine,
)
from parsers.unmatched_notes_parser import (
    parse_unmatched_items,
    has_unmatched_block,
    format_unmatched_block,
    append_unmatched_block,
    remove_unmatched_block,
    replace_unmatched_block,
)

__all__ = [
    "parse_order_csv",
    "OrderCSVParseResult",
    "ParsedOrderLine",
    "parse_unmatched_items",
    "has_unmatched_block",
    "format_unmatched_block",
    "append_unmatched_block",
    "remove_unmatched_block",
    "replace_unmatched_block",
]
