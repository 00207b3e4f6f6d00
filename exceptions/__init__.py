"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DatabaseError,

    # Import
    CSVParseError,
    UnresolvedImportLinesError,
    ImportCustomerRequiredError,

    # Catalog / orders
    CatalogItemNotFoundError,
    OrderNotFoundError,
    AliasNotFoundError,

    # Reconciliation
    InvalidSelectionError,
    SessionCompleteError,
    NoUnmatchedItemsError,
    ReconciliationStepError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",

    # Import
    "CSVParseError",
    "UnresolvedImportLinesError",
    "ImportCustomerRequiredError",

    # Catalog / orders
    "CatalogItemNotFoundError",
    "OrderNotFoundError",
    "AliasNotFoundError",

    # Reconciliation
    "InvalidSelectionError",
    "SessionCompleteError",
    "NoUnmatchedItemsError",
    "ReconciliationStepError",
]
