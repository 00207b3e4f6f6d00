"""
Reconciliation session schemas.

A session walks the items listed in an order's unmatched-items notes
block one at a time. The session is a plain value: transitions return a
new session and the caller decides where to keep it.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from models.alias import ItemAlias
from models.base import BaseSchema
from models.order import OrderLineCreate, OrderTotals


class UnmatchedItemRecord(BaseSchema):
    """One entry of an unmatched-items block."""

    name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    code: Optional[str] = None


class SessionState(str, Enum):
    """Where a reconciliation session stands."""
    AWAITING_RESOLUTION = "awaiting_resolution"
    RESOLVING = "resolving"
    DONE = "done"


class ReconciliationSession(BaseSchema):
    """
    In-memory workflow state for one order.

    `totals` mirrors the order totals as last committed by this session.
    """

    order_id: str
    tenant_id: str
    items: list[UnmatchedItemRecord] = Field(default_factory=list)
    cursor: int = Field(default=0, ge=0)
    state: SessionState = SessionState.AWAITING_RESOLUTION
    confirmed_lines: list[OrderLineCreate] = Field(default_factory=list)
    skipped: list[int] = Field(
        default_factory=list,
        description="Cursor positions that were skipped"
    )
    totals: OrderTotals = Field(default_factory=OrderTotals)

    @property
    def current_item(self) -> Optional[UnmatchedItemRecord]:
        if self.state == SessionState.DONE or self.cursor >= len(self.items):
            return None
        return self.items[self.cursor]

    @property
    def is_exhausted(self) -> bool:
        return self.cursor >= len(self.items)

    @property
    def remaining_items(self) -> list[UnmatchedItemRecord]:
        return self.items[self.cursor:]


class SelectMatchRequest(BaseSchema):
    """Confirm a catalog item for the session's current entry."""

    session: ReconciliationSession
    item_id: str = Field(..., min_length=1)
    remember_alias: bool = Field(
        default=False,
        description="Remember this name -> item association for future imports"
    )


class SessionRequest(BaseSchema):
    """Carries a session for skip/close calls."""

    session: ReconciliationSession


class StepResult(BaseSchema):
    """Outcome of a committed reconciliation step."""

    session: ReconciliationSession
    order_line: Optional[OrderLineCreate] = None
    alias: Optional[ItemAlias] = None
    finished: bool = Field(
        default=False,
        description="Cursor exhausted; the caller should close the session"
    )


class CloseResult(BaseSchema):
    """Outcome of closing a session."""

    session: ReconciliationSession
    notes: Optional[str] = None
    matched_count: int = 0
