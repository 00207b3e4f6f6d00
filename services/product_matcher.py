"""
Product matching against a catalog snapshot.

Resolution order for one order line, first hit wins:
1. Barcode equal after normalization (exact)
2. Remembered alias for the normalized name (exact)
3. Name equal, or one name contains the other (high)
4. Best fuzzy similarity at or above the threshold (low)

Only active items take part. Candidates are visited in id order so the
same inputs always produce the same match.
"""

import re
from typing import Iterable, Optional
import structlog

from models.catalog import CatalogItem
from models.matching import (
    DEFAULT_MATCHING_CONFIG,
    ItemSuggestion,
    MatchConfidence,
    MatchingConfig,
    MatchTag,
    ProductMatchResult,
)
from utils.similarity import similarity
from utils.text_utils import normalize_barcode, normalize_product_name

logger = structlog.get_logger(__name__)

# Suggestion scoring
SUGGESTION_EQUAL = 1.0
SUGGESTION_CONTAINS = 0.8
SUGGESTION_MIN_SCORE = 0.2
MIN_WORD_LENGTH = 3

_NON_WORD = re.compile(r"[^\w\s']")


def active_snapshot(catalog: Iterable[CatalogItem]) -> list[CatalogItem]:
    """Active items in stable id order."""
    return sorted((item for item in catalog if item.is_active), key=lambda item: item.id)


def match_product(
    barcode: Optional[str],
    product_name: Optional[str],
    catalog: Iterable[CatalogItem],
    aliases: Optional[dict[str, str]] = None,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG
) -> ProductMatchResult:
    """
    Resolve one order line to a catalog item.

    Args:
        barcode: Barcode from the order line (may be empty)
        product_name: Product name from the order line (may be empty)
        catalog: Catalog snapshot
        aliases: Normalized name -> item_id for the tenant
        config: Fuzzy thresholds

    Returns:
        ProductMatchResult; confidence "none" with no item when nothing matched
    """
    barcode = barcode or ""
    product_name = product_name or ""
    candidates = active_snapshot(catalog)

    if not candidates:
        return ProductMatchResult(barcode=barcode, product_name=product_name)

    # Tier 1: barcode
    key = normalize_barcode(barcode)
    if key:
        for item in candidates:
            if normalize_barcode(item.barcode) == key:
                return ProductMatchResult(
                    barcode=barcode,
                    product_name=product_name,
                    item=item,
                    confidence=MatchConfidence.EXACT,
                    matched_by=MatchTag.BARCODE,
                )

    name = normalize_product_name(product_name)
    if not name:
        return ProductMatchResult(barcode=barcode, product_name=product_name)

    # Tier 2: remembered alias
    if aliases:
        item_id = aliases.get(name)
        if item_id:
            item = next((c for c in candidates if c.id == item_id), None)
            if item is not None:
                return ProductMatchResult(
                    barcode=barcode,
                    product_name=product_name,
                    item=item,
                    confidence=MatchConfidence.EXACT,
                    matched_by=MatchTag.NAME,
                    via_alias=True,
                )
            logger.debug("alias_target_unavailable", alias_name=name, item_id=item_id)

    # Tier 3: equal or containing names
    for item in candidates:
        item_name = normalize_product_name(item.name)
        if item_name and (item_name == name or item_name in name or name in item_name):
            return ProductMatchResult(
                barcode=barcode,
                product_name=product_name,
                item=item,
                confidence=MatchConfidence.HIGH,
                matched_by=MatchTag.NAME,
            )

    # Tier 4: fuzzy, first strictly-better candidate wins ties
    best_item = None
    best_score = 0.0
    for item in candidates:
        score = similarity(name, normalize_product_name(item.name), config.containment_score)
        if score > best_score:
            best_item = item
            best_score = score

    if best_item is not None and best_score >= config.product_fuzzy_threshold:
        return ProductMatchResult(
            barcode=barcode,
            product_name=product_name,
            item=best_item,
            confidence=MatchConfidence.LOW,
            matched_by=MatchTag.NAME,
            score=best_score,
        )

    return ProductMatchResult(barcode=barcode, product_name=product_name)


# ===================
# MANUAL RESOLUTION HELPERS
# ===================

def _suggestion_words(value: Optional[str]) -> str:
    text = _NON_WORD.sub(" ", normalize_product_name(value))
    return " ".join(text.split())


def suggestion_score(name: str, item_name: str) -> float:
    """
    Loose relevance of a catalog name to a free-text name.

    1.0 for equal names, 0.8 when one contains the other, otherwise the
    share of meaningful words (3+ characters) they have in common.
    """
    a = _suggestion_words(name)
    b = _suggestion_words(item_name)
    if not a or not b:
        return 0.0
    if a == b:
        return SUGGESTION_EQUAL
    if a in b or b in a:
        return SUGGESTION_CONTAINS

    words_a = {w for w in a.split() if len(w) >= MIN_WORD_LENGTH}
    words_b = {w for w in b.split() if len(w) >= MIN_WORD_LENGTH}
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / max(len(words_a), len(words_b))


def suggest_items(
    name: str,
    catalog: Iterable[CatalogItem],
    limit: Optional[int] = None,
    show_all: bool = False
) -> list[ItemSuggestion]:
    """
    Rank catalog items as candidates for an unresolved name.

    Args:
        name: Free-text product name
        catalog: Catalog snapshot (inactive items are ignored)
        limit: Max suggestions returned (None for all)
        show_all: Keep weak candidates too

    Returns:
        Suggestions by descending score, then item id
    """
    suggestions = []
    for item in active_snapshot(catalog):
        score = suggestion_score(name, item.name)
        if show_all or score > SUGGESTION_MIN_SCORE:
            suggestions.append(ItemSuggestion(item=item, score=score))

    suggestions.sort(key=lambda s: (-s.score, s.item.id))
    return suggestions[:limit] if limit else suggestions


def search_items(query: str, catalog: Iterable[CatalogItem]) -> list[CatalogItem]:
    """Active items whose name or SKU contains the query, case-insensitive."""
    needle = (query or "").strip().lower()
    items = active_snapshot(catalog)
    if not needle:
        return items
    return [
        item for item in items
        if needle in item.name.lower() or needle in (item.sku or "").lower()
    ]
