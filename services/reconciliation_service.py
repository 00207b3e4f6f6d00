"""
Interactive reconciliation of unmatched order items.

An order whose notes carry an unmatched-items block is worked through
one item at a time. The transitions below are pure: they take a
session and return the next one. ReconciliationService performs the
writes for each step and only hands back the advanced session once
every write of that step has succeeded.
"""

from decimal import Decimal
from typing import Optional
import structlog

from config.settings import settings
from models.catalog import CatalogItem
from models.matching import ItemSuggestion
from models.order import OrderLineCreate, OrderRecord, OrderTotals
from models.reconciliation import (
    CloseResult,
    ReconciliationSession,
    SessionState,
    StepResult,
)
from exceptions import (
    AppError,
    DatabaseError,
    InvalidSelectionError,
    NoUnmatchedItemsError,
    ReconciliationStepError,
    SessionCompleteError,
)
from parsers.unmatched_notes_parser import (
    parse_unmatched_items,
    remove_unmatched_block,
    replace_unmatched_block,
)
from services.alias_service import AliasService
from services.catalog_service import CatalogService
from services.order_service import OrderService, add_line_to_totals, line_total
from services.product_matcher import suggest_items

logger = structlog.get_logger(__name__)

DEFAULT_UNIT = "each"


# ===================
# SESSION TRANSITIONS
# ===================

def start_session(order: OrderRecord) -> ReconciliationSession:
    """
    Open a session over the order's unmatched-items block.

    A session with nothing to resolve starts out done.
    """
    items = parse_unmatched_items(order.notes)
    return ReconciliationSession(
        order_id=order.id,
        tenant_id=order.tenant_id,
        items=items,
        totals=order.totals,
        state=SessionState.AWAITING_RESOLUTION if items else SessionState.DONE,
    )


def begin_resolving(session: ReconciliationSession) -> ReconciliationSession:
    """Mark the current item as being worked on."""
    _require_open(session)
    return session.model_copy(update={"state": SessionState.RESOLVING})


def build_order_line(session: ReconciliationSession, item: CatalogItem) -> OrderLineCreate:
    """Line for the current record at the item's current price."""
    record = session.current_item
    return OrderLineCreate(
        order_id=session.order_id,
        tenant_id=session.tenant_id,
        procurement_item_id=item.id,
        name=item.name,
        quantity=record.quantity,
        unit=item.unit or DEFAULT_UNIT,
        unit_price=item.wholesale_price,
        total=line_total(item.wholesale_price, record.quantity),
    )


def select_match(
    session: ReconciliationSession,
    item: Optional[CatalogItem],
    current_totals: Optional[OrderTotals] = None,
    default_tax_rate: Optional[Decimal] = None
) -> tuple[ReconciliationSession, OrderLineCreate]:
    """
    Confirm `item` for the current record.

    Args:
        session: Session positioned on the record being resolved
        item: The chosen catalog item
        current_totals: Order totals as stored now; defaults to the session's
        default_tax_rate: Rate for items without one; defaults to settings

    Returns:
        (next session, order line to insert). The next session carries
        the new totals and is advanced by one.

    Raises:
        SessionCompleteError: If the session has nothing left
        InvalidSelectionError: If no item was given or it is not active
    """
    _require_open(session)
    if item is None:
        raise InvalidSelectionError("No catalog item selected")
    if not item.is_active:
        raise InvalidSelectionError("Catalog item is not active", item_id=item.id)
    if item.tenant_id and item.tenant_id != session.tenant_id:
        raise InvalidSelectionError("Catalog item belongs to another tenant", item_id=item.id)

    if default_tax_rate is None:
        default_tax_rate = Decimal(str(settings.default_tax_rate))

    line = build_order_line(session, item)
    totals = add_line_to_totals(
        current_totals or session.totals,
        line.total,
        item.tax_rate,
        default_tax_rate,
    )

    next_session = _advance(session.model_copy(update={
        "confirmed_lines": [*session.confirmed_lines, line],
        "totals": totals,
    }))
    return next_session, line


def skip(session: ReconciliationSession) -> ReconciliationSession:
    """Move past the current record without a line."""
    _require_open(session)
    return _advance(session.model_copy(update={
        "skipped": [*session.skipped, session.cursor],
    }))


def end_session(session: ReconciliationSession) -> ReconciliationSession:
    """Stop resolving; committed lines stay as they are."""
    return session.model_copy(update={"state": SessionState.DONE})


def _require_open(session: ReconciliationSession) -> None:
    if session.current_item is None:
        raise SessionCompleteError(session.order_id)


def _advance(session: ReconciliationSession) -> ReconciliationSession:
    cursor = session.cursor + 1
    state = SessionState.DONE if cursor >= len(session.items) else SessionState.AWAITING_RESOLUTION
    return session.model_copy(update={"cursor": cursor, "state": state})


def _failure_message(error: Exception) -> str:
    if isinstance(error, DatabaseError):
        return error.reason
    if isinstance(error, AppError):
        return error.message
    return str(error)


# ===================
# SERVICE
# ===================

class ReconciliationService:
    """
    Runs reconciliation steps against storage.

    Writes of one step happen in a fixed order: order line, order
    totals, then the alias if requested. A failure undoes the writes the
    step already made and the caller keeps its previous session, so the
    step can be retried.
    """

    def __init__(
        self,
        order_service: Optional[OrderService] = None,
        catalog_service: Optional[CatalogService] = None,
        alias_service: Optional[AliasService] = None,
        default_tax_rate: Optional[Decimal] = None
    ):
        self.orders = order_service or OrderService()
        self.catalog = catalog_service or CatalogService()
        self.aliases = alias_service or AliasService(catalog_service=self.catalog)
        self.default_tax_rate = (
            default_tax_rate if default_tax_rate is not None
            else Decimal(str(settings.default_tax_rate))
        )

    def open_session(self, order_id: str) -> ReconciliationSession:
        """
        Start a session for an order.

        Raises:
            OrderNotFoundError: If the order doesn't exist
            NoUnmatchedItemsError: If the notes hold no parseable items
        """
        order = self.orders.get_order(order_id)
        session = start_session(order)

        if not session.items:
            logger.warning("no_unmatched_items", order_id=order_id)
            raise NoUnmatchedItemsError(order_id)

        logger.info(
            "reconciliation_session_opened",
            order_id=order_id,
            item_count=len(session.items)
        )

        return begin_resolving(session)

    def get_suggestions(
        self,
        tenant_id: str,
        name: str,
        limit: Optional[int] = None,
        show_all: bool = False
    ) -> list[ItemSuggestion]:
        """Ranked catalog candidates for a name."""
        catalog = self.catalog.get_active_items(tenant_id)
        return suggest_items(name, catalog, limit=limit, show_all=show_all)

    def select_match(
        self,
        session: ReconciliationSession,
        item_id: str,
        remember_alias: bool = False
    ) -> StepResult:
        """
        Confirm a catalog item for the session's current record.

        Args:
            session: Current session
            item_id: Chosen catalog item
            remember_alias: Also remember the record's name for this item

        Returns:
            StepResult with the advanced session

        Raises:
            CatalogItemNotFoundError: If the item doesn't exist
            InvalidSelectionError: If the item can't be used
            SessionCompleteError: If nothing is left to resolve
            ReconciliationStepError: If a write failed; earlier writes are undone
        """
        record = session.current_item
        if record is None:
            raise SessionCompleteError(session.order_id)

        item = self.catalog.get_item(item_id)
        order = self.orders.get_order(session.order_id)

        next_session, line = select_match(
            session,
            item,
            current_totals=order.totals,
            default_tax_rate=self.default_tax_rate,
        )

        alias = None
        line_id = None
        totals_written = False
        stage = "insert_order_line"
        try:
            line_id = self.orders.insert_order_line(line)

            stage = "update_order_totals"
            self.orders.update_order_totals(session.order_id, next_session.totals)
            totals_written = True

            if remember_alias:
                stage = "upsert_alias"
                alias = self.aliases.upsert_alias(session.tenant_id, item.id, record.name)

        except Exception as e:
            logger.error(
                "reconciliation_step_failed",
                order_id=session.order_id,
                cursor=session.cursor,
                stage=stage,
                error=str(e)
            )
            self._undo_step(session.order_id, line_id, order.totals if totals_written else None)
            raise ReconciliationStepError(
                stage,
                _failure_message(e),
                session.order_id,
                session.cursor,
            ) from e

        logger.info(
            "reconciliation_item_matched",
            order_id=session.order_id,
            cursor=session.cursor,
            item_id=item.id,
            quantity=line.quantity,
            alias_saved=alias is not None
        )

        return StepResult(
            session=next_session,
            order_line=line,
            alias=alias,
            finished=next_session.is_exhausted,
        )

    def _undo_step(
        self,
        order_id: str,
        line_id: Optional[str],
        previous_totals: Optional[OrderTotals]
    ) -> None:
        """
        Reverse the writes of a failed step, newest first.

        The step's own error is what the caller sees; a failing undo is
        logged so the order can be repaired by hand.
        """
        if previous_totals is not None:
            try:
                self.orders.update_order_totals(order_id, previous_totals)
            except Exception as e:
                logger.error(
                    "reconciliation_totals_restore_failed",
                    order_id=order_id,
                    error=str(e)
                )

        if line_id is not None:
            try:
                self.orders.delete_order_line(line_id)
            except Exception as e:
                logger.error(
                    "reconciliation_line_delete_failed",
                    order_id=order_id,
                    line_id=line_id,
                    error=str(e)
                )

        logger.warning(
            "reconciliation_step_rolled_back",
            order_id=order_id,
            line_deleted=line_id is not None,
            totals_restored=previous_totals is not None
        )

    def skip(self, session: ReconciliationSession) -> StepResult:
        """Skip the current record. No writes."""
        next_session = skip(session)

        logger.info(
            "reconciliation_item_skipped",
            order_id=session.order_id,
            cursor=session.cursor
        )

        return StepResult(session=next_session, finished=next_session.is_exhausted)

    def close_session(self, session: ReconciliationSession) -> CloseResult:
        """
        Write the notes for a finished or abandoned session.

        An exhausted session removes the unmatched-items block. An early
        close rewrites the block with the records not yet handled,
        starting with the current one. Committed lines are never undone.

        Raises:
            ReconciliationStepError: If the notes update failed
        """
        order = self.orders.get_order(session.order_id)
        closed = end_session(session)
        matched_count = len(session.confirmed_lines)

        if session.is_exhausted:
            notes = remove_unmatched_block(order.notes)
        elif session.cursor == 0:
            # Nothing handled, notes stay as they are
            return CloseResult(session=closed, notes=order.notes, matched_count=matched_count)
        else:
            notes = replace_unmatched_block(order.notes, session.remaining_items)

        try:
            self.orders.update_order_notes(session.order_id, notes)
        except Exception as e:
            logger.error(
                "reconciliation_close_failed",
                order_id=session.order_id,
                error=str(e)
            )
            raise ReconciliationStepError(
                "update_order_notes",
                _failure_message(e),
                session.order_id,
                session.cursor,
            ) from e

        logger.info(
            "reconciliation_session_closed",
            order_id=session.order_id,
            matched_count=matched_count,
            skipped_count=len(session.skipped),
            remaining_count=len(session.remaining_items)
        )

        return CloseResult(session=closed, notes=notes, matched_count=matched_count)


# Singleton instance
_reconciliation_service: Optional[ReconciliationService] = None


def get_reconciliation_service() -> ReconciliationService:
    """Get or create ReconciliationService instance."""
    global _reconciliation_service
    if _reconciliation_service is None:
        _reconciliation_service = ReconciliationService()
    return _reconciliation_service
