"""
Unmatched-items block embedded in order notes.

When an import leaves items unresolved they are written into the order's
free-text notes so a person can resolve them later:

    ⚠️ UNMATCHED ITEMS (2):
    • Widget B x3 (no code)
    • Widget C x1 (SKU99)

The block ends at a blank line or at the end of the notes. Two entry
grammars are read: "NAME xQTY (CODE)" and the legacy "NAME (CODE)",
where quantity defaults to 1. "no code" means the code is absent.
This grammar is versioned by these tests; extend it only deliberately.
"""

import re
from typing import Iterable, Optional
import structlog

from models.reconciliation import UnmatchedItemRecord

logger = structlog.get_logger(__name__)

BLOCK_ICON = "⚠️"
NO_CODE = "no code"
BULLET = "•"

# Optional icon (any run of symbol characters) before the header
_HEADER = r"(?:[^\w\s]+[ \t]*)?UNMATCHED ITEMS \((?P<count>\d+)\):"
_BODY = r"[ \t]*(?:\r?\n)?(?P<body>.*?)(?=\r?\n[ \t\r]*\n|\Z)"
_BLOCK = re.compile(_HEADER + _BODY, re.DOTALL)

_SPLIT = re.compile(r"[\r\n]+|[•●○◦▪‣⁃]")
_LEADING = re.compile(r"^[\s\-\*]+")
_ENTRY = re.compile(r"^(?P<name>.+?)\s+x(?P<quantity>\d+)\s*\((?P<code>[^)]+)\)\s*$")
_LEGACY_ENTRY = re.compile(r"^(?P<name>.+?)\s*\((?P<code>[^)]+)\)\s*$")


def has_unmatched_block(notes: Optional[str]) -> bool:
    """True when the notes contain an unmatched-items header."""
    return bool(notes) and _BLOCK.search(notes) is not None


def parse_unmatched_items(notes: Optional[str]) -> list[UnmatchedItemRecord]:
    """
    Extract unmatched item records from order notes.

    Fragments matching neither grammar are dropped; old notes may hold
    free text that cannot be structured. Reads only.

    Args:
        notes: The order's notes field

    Returns:
        Records in the order they appear (empty if there is no block)
    """
    if not notes:
        return []

    block = _BLOCK.search(notes)
    if not block:
        return []

    items = []
    dropped = 0
    for fragment in _SPLIT.split(block.group("body")):
        text = _LEADING.sub("", fragment).strip()
        if not text:
            continue

        record = _parse_entry(text)
        if record is None:
            dropped += 1
            continue
        items.append(record)

    logger.debug(
        "unmatched_items_parsed",
        declared_count=int(block.group("count")),
        parsed_count=len(items),
        dropped_count=dropped
    )

    return items


def _parse_entry(text: str) -> Optional[UnmatchedItemRecord]:
    match = _ENTRY.match(text)
    if match:
        quantity = int(match.group("quantity"))
        if quantity < 1:
            return None
        return UnmatchedItemRecord(
            name=match.group("name").strip(),
            quantity=quantity,
            code=_code_or_none(match.group("code")),
        )

    match = _LEGACY_ENTRY.match(text)
    if match:
        return UnmatchedItemRecord(
            name=match.group("name").strip(),
            quantity=1,
            code=_code_or_none(match.group("code")),
        )

    return None


def _code_or_none(code: str) -> Optional[str]:
    code = code.strip()
    if not code or code.lower() == NO_CODE:
        return None
    return code


# ===================
# WRITERS
# ===================

def format_unmatched_block(items: Iterable[UnmatchedItemRecord]) -> str:
    """
    Render records as a notes block in the current grammar.

    The output parses back to the same records.
    """
    items = list(items)
    lines = [f"{BLOCK_ICON} UNMATCHED ITEMS ({len(items)}):"]
    for item in items:
        lines.append(f"{BULLET} {item.name} x{item.quantity} ({item.code or NO_CODE})")
    return "\n".join(lines)


def append_unmatched_block(
    notes: Optional[str],
    items: Iterable[UnmatchedItemRecord]
) -> Optional[str]:
    """Append a block to existing notes, separated by a blank line."""
    items = list(items)
    if not items:
        return notes
    block = format_unmatched_block(items)
    if notes and notes.strip():
        return f"{notes.rstrip()}\n\n{block}"
    return block


def remove_unmatched_block(notes: Optional[str]) -> Optional[str]:
    """
    Remove the unmatched-items block from notes.

    Returns:
        Remaining notes, trimmed, or None if nothing is left
    """
    if not notes:
        return None
    remaining = _BLOCK.sub("", notes, count=1)
    remaining = re.sub(r"\n{3,}", "\n\n", remaining).strip()
    return remaining or None


def replace_unmatched_block(
    notes: Optional[str],
    items: Iterable[UnmatchedItemRecord]
) -> Optional[str]:
    """Swap the block for one listing only the given records."""
    return append_unmatched_block(remove_unmatched_block(notes), items)
