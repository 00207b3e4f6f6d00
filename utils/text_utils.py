"""
Text normalization primitives.

Everything that compares names, barcodes or dates goes through these so
that every matcher agrees on what "the same" means.
"""

import re
from datetime import date
from typing import Optional

# Curly quotes, reversed quote, prime and backtick all become "'"
_APOSTROPHES = re.compile(r"[‘’‛′`]")
_WHITESPACE = re.compile(r"\s+")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SLASH_DATE = re.compile(r"^(\d+)/(\d+)/(\d+)$")


def normalize_text(text: Optional[str]) -> str:
    """
    Lowercase, collapse whitespace runs to one space, trim.

    Idempotent: normalize_text(normalize_text(s)) == normalize_text(s).

    Examples:
        "  ACME   Pty\\tLtd " → "acme pty ltd"
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.lower()).strip()


def normalize_product_name(name: Optional[str]) -> str:
    """
    normalize_text plus a single apostrophe form.

    Examples:
        "Nana’s  Jam" → "nana's jam"
    """
    if not name:
        return ""
    return normalize_text(_APOSTROPHES.sub("'", name))


def normalize_barcode(barcode: Optional[str]) -> str:
    """
    Remove all whitespace, then strip leading zeros.

    An empty result must never be used as a match key.

    Examples:
        "0 123 456" → "123456"
        "000"       → ""
    """
    if not barcode:
        return ""
    return _WHITESPACE.sub("", barcode).lstrip("0")


def normalize_date(value: Optional[str], today: Optional[date] = None) -> str:
    """
    Convert an order date to YYYY-MM-DD.

    ISO input is returned unchanged. DD/MM/YYYY (any digit width) is
    zero-padded into ISO form. Anything else falls back to today; callers
    needing strictness must validate before calling.

    Args:
        value: Raw date text
        today: Override for the fallback date

    Returns:
        ISO date string
    """
    fallback = (today or date.today()).isoformat()
    if not value:
        return fallback

    text = value.strip()
    if _ISO_DATE.match(text):
        return text

    match = _SLASH_DATE.match(text)
    if match:
        day, month, year = match.groups()
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    return fallback
