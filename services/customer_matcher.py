"""
Customer matching against a directory snapshot.

A free-text customer name is compared with each customer's business
name, contact name and full name:
1. Equal to any field (exact), fields tried in that order
2. Name contains a field or a field contains the name (high)
3. Best fuzzy similarity over the three fields, at or above the
   threshold (low)
"""

from typing import Iterable, Optional
import structlog

from models.catalog import CustomerRecord
from models.matching import (
    DEFAULT_MATCHING_CONFIG,
    CustomerMatchResult,
    MatchConfidence,
    MatchingConfig,
    MatchTag,
)
from utils.similarity import similarity
from utils.text_utils import normalize_text

logger = structlog.get_logger(__name__)

NAME_FIELDS = ("business_name", "contact_name", "full_name")


def _field(customer: CustomerRecord, field: str) -> str:
    return normalize_text(getattr(customer, field))


def match_customer(
    customer_name: Optional[str],
    directory: Iterable[CustomerRecord],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG
) -> CustomerMatchResult:
    """
    Resolve a customer name to a directory record.

    Empty name fields never match by containment.

    Args:
        customer_name: Name as it appeared in the order
        directory: Customer snapshot
        config: Fuzzy thresholds

    Returns:
        CustomerMatchResult; confidence "none" with no customer when nothing matched
    """
    customer_name = customer_name or ""
    name = normalize_text(customer_name)
    customers = sorted(directory, key=lambda c: c.id)

    if not name or not customers:
        return CustomerMatchResult(customer_name=customer_name)

    # Tier 1: exact, business name first
    for field in NAME_FIELDS:
        for customer in customers:
            if _field(customer, field) == name:
                return CustomerMatchResult(
                    customer_name=customer_name,
                    customer=customer,
                    confidence=MatchConfidence.EXACT,
                    matched_by=MatchTag.NAME,
                    matched_field=field,
                )

    # Tier 2: containment either way
    for customer in customers:
        for field in NAME_FIELDS:
            value = _field(customer, field)
            if value and (value in name or name in value):
                return CustomerMatchResult(
                    customer_name=customer_name,
                    customer=customer,
                    confidence=MatchConfidence.HIGH,
                    matched_by=MatchTag.PARTIAL,
                    matched_field=field,
                )

    # Tier 3: fuzzy, best field per customer
    best_customer = None
    best_field = None
    best_score = 0.0
    for customer in customers:
        for field in NAME_FIELDS:
            score = similarity(name, _field(customer, field), config.containment_score)
            if score > best_score:
                best_customer = customer
                best_field = field
                best_score = score

    if best_customer is not None and best_score >= config.customer_fuzzy_threshold:
        logger.debug(
            "customer_fuzzy_match",
            customer_id=best_customer.id,
            score=round(best_score, 3)
        )
        return CustomerMatchResult(
            customer_name=customer_name,
            customer=best_customer,
            confidence=MatchConfidence.LOW,
            matched_by=MatchTag.PARTIAL,
            matched_field=best_field,
            score=best_score,
        )

    return CustomerMatchResult(customer_name=customer_name)
