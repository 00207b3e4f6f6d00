"""
Match result schemas and matching configuration.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from models.base import BaseSchema
from models.catalog import CatalogItem, CustomerRecord


class MatchConfidence(str, Enum):
    """How certain a match is. Ordered exact > high > low > none."""
    EXACT = "exact"
    HIGH = "high"
    LOW = "low"
    NONE = "none"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {
    MatchConfidence.EXACT: 3,
    MatchConfidence.HIGH: 2,
    MatchConfidence.LOW: 1,
    MatchConfidence.NONE: 0,
}


class MatchTag(str, Enum):
    """Which rule produced a match."""
    BARCODE = "barcode"
    NAME = "name"
    PARTIAL = "partial"


class MatchingConfig(BaseModel):
    """
    Thresholds for the fuzzy tiers.

    The defaults are empirical and uncalibrated; deployments override
    them through settings.
    """
    product_fuzzy_threshold: float = Field(default=0.8, ge=0, le=1)
    customer_fuzzy_threshold: float = Field(default=0.7, ge=0, le=1)
    containment_score: float = Field(default=0.85, ge=0, le=1)


DEFAULT_MATCHING_CONFIG = MatchingConfig()


class _MatchResult(BaseSchema):
    confidence: MatchConfidence = MatchConfidence.NONE
    matched_by: Optional[MatchTag] = None
    score: Optional[float] = Field(
        None,
        ge=0,
        le=1,
        description="Similarity behind a fuzzy match"
    )

    def _check_entity(self, entity) -> None:
        # "none" and a missing entity always travel together
        if (self.confidence == MatchConfidence.NONE) != (entity is None):
            raise ValueError("confidence 'none' requires no match, and vice versa")
        if entity is None and self.matched_by is not None:
            raise ValueError("an unmatched result cannot carry a match tag")

    @property
    def is_matched(self) -> bool:
        return self.confidence != MatchConfidence.NONE


class ProductMatchResult(_MatchResult):
    """Outcome of resolving one order line against the catalog."""

    barcode: str = ""
    product_name: str = ""
    item: Optional[CatalogItem] = None
    via_alias: bool = Field(
        default=False,
        description="Resolved through a remembered alias"
    )

    @model_validator(mode="after")
    def entity_matches_confidence(self):
        self._check_entity(self.item)
        return self


class CustomerMatchResult(_MatchResult):
    """Outcome of resolving a free-text customer name."""

    customer_name: str = ""
    customer: Optional[CustomerRecord] = None
    matched_field: Optional[str] = Field(
        None,
        description="business_name, contact_name or full_name for exact hits"
    )

    @model_validator(mode="after")
    def entity_matches_confidence(self):
        self._check_entity(self.customer)
        return self


class ItemSuggestion(BaseSchema):
    """A ranked candidate offered while resolving an item by hand."""

    item: CatalogItem
    score: float = Field(..., ge=0, le=1)
