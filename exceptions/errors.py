"""
Custom exception classes for the application.

Every error that crosses the API boundary is an AppError carrying a
stable code, an HTTP status and structured details.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ORDER_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current resource state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )
        self.reason = message


# ===================
# IMPORT ERRORS
# ===================

class CSVParseError(ValidationError):
    """CSV import produced no usable order lines."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CSV_PARSE_ERROR",
            message=message,
            details=details
        )


class UnresolvedImportLinesError(ValidationError):
    """Import submitted while some kept lines have no catalog item."""

    def __init__(self, line_indexes: list[int]):
        super().__init__(
            code="IMPORT_UNRESOLVED_LINES",
            message=f"Resolve {len(line_indexes)} unmatched item(s) before submitting",
            details={"line_indexes": line_indexes}
        )


class ImportCustomerRequiredError(ValidationError):
    """Import submitted without a customer."""

    def __init__(self, customer_name: str):
        super().__init__(
            code="IMPORT_CUSTOMER_REQUIRED",
            message="Select a customer before submitting the import",
            details={"customer_name": customer_name}
        )


# ===================
# CATALOG / ORDER ERRORS
# ===================

class CatalogItemNotFoundError(NotFoundError):
    """Catalog item not found."""

    def __init__(self, item_id: str):
        super().__init__(
            resource="Catalog item",
            identifier=item_id,
            code="CATALOG_ITEM_NOT_FOUND"
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Order",
            identifier=order_id,
            code="ORDER_NOT_FOUND"
        )


class AliasNotFoundError(NotFoundError):
    """Item name alias not found."""

    def __init__(self, alias_id: str):
        super().__init__(
            resource="Alias",
            identifier=alias_id,
            code="ALIAS_NOT_FOUND"
        )


# ===================
# RECONCILIATION ERRORS
# ===================

class InvalidSelectionError(ValidationError):
    """A reconciliation step was given no item, or an unusable one."""

    def __init__(self, reason: str, item_id: Optional[str] = None):
        super().__init__(
            code="INVALID_SELECTION",
            message=reason,
            details={"item_id": item_id}
        )


class SessionCompleteError(ConflictError):
    """Step attempted on a session with no remaining items."""

    def __init__(self, order_id: str):
        super().__init__(
            code="SESSION_COMPLETE",
            message="Reconciliation session has no remaining items",
            details={"order_id": order_id}
        )


class NoUnmatchedItemsError(ValidationError):
    """Order notes contain no parseable unmatched-items block."""

    def __init__(self, order_id: str):
        super().__init__(
            code="NO_UNMATCHED_ITEMS",
            message="Could not parse unmatched items from order notes",
            details={"order_id": order_id}
        )


class ReconciliationStepError(AppError):
    """
    A write failed during a reconciliation step.

    The storage message is kept verbatim; the session cursor was not
    advanced, so the same step can be retried.
    """

    def __init__(self, stage: str, message: str, order_id: str, cursor: int):
        super().__init__(
            code="RECONCILIATION_STEP_FAILED",
            message=message,
            status_code=500,
            details={"stage": stage, "order_id": order_id, "cursor": cursor}
        )
