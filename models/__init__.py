"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.catalog import (
    ItemStatus,
    CatalogItem,
    CustomerRecord,
)
from models.matching import (
    MatchConfidence,
    MatchTag,
    MatchingConfig,
    DEFAULT_MATCHING_CONFIG,
    ProductMatchResult,
    CustomerMatchResult,
    ItemSuggestion,
)
from models.alias import (
    AliasCreate,
    ItemAlias,
    AliasListResponse,
)
from models.order import (
    OrderStatus,
    OrderTotals,
    OrderLineCreate,
    OrderRecord,
)
from models.reconciliation import (
    UnmatchedItemRecord,
    SessionState,
    ReconciliationSession,
    SelectMatchRequest,
    SessionRequest,
    StepResult,
    CloseResult,
)
from models.order_import import (
    ImportPolicy,
    ImportLine,
    ImportPreview,
    ImportPreviewRequest,
    ImportSubmitRequest,
    ImportSubmitResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Catalog
    "ItemStatus",
    "CatalogItem",
    "CustomerRecord",

    # Matching
    "MatchConfidence",
    "MatchTag",
    "MatchingConfig",
    "DEFAULT_MATCHING_CONFIG",
    "ProductMatchResult",
    "CustomerMatchResult",
    "ItemSuggestion",

    # Aliases
    "AliasCreate",
    "ItemAlias",
    "AliasListResponse",

    # Orders
    "OrderStatus",
    "OrderTotals",
    "OrderLineCreate",
    "OrderRecord",

    # Reconciliation
    "UnmatchedItemRecord",
    "SessionState",
    "ReconciliationSession",
    "SelectMatchRequest",
    "SessionRequest",
    "StepResult",
    "CloseResult",

    # Import
    "ImportPolicy",
    "ImportLine",
    "ImportPreview",
    "ImportPreviewRequest",
    "ImportSubmitRequest",
    "ImportSubmitResponse",
]
