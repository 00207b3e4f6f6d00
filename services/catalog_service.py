"""
Catalog and customer directory reads.

Matching works on snapshots: these reads return plain lists that the
matchers iterate without touching storage again.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.catalog import CatalogItem, CustomerRecord, ItemStatus
from exceptions import CatalogItemNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)

CUSTOMER_ROLE = "customer"
CUSTOMER_COLUMNS = "id, tenant_id, email, business_name, contact_name, full_name"


class CatalogService:
    """
    Read-only access to catalog items and the customer directory.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "items"
        self.users_table = "users"

    # ===================
    # CATALOG ITEMS
    # ===================

    def get_active_items(self, tenant_id: str) -> list[CatalogItem]:
        """
        Get the tenant's active catalog items.

        Args:
            tenant_id: Tenant UUID

        Returns:
            Items ordered by id
        """
        logger.debug("getting_active_items", tenant_id=tenant_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("tenant_id", tenant_id)
                .eq("status", ItemStatus.ACTIVE.value)
                .order("id")
                .execute()
            )

            items = [CatalogItem(**row) for row in result.data]

            logger.info(
                "active_items_retrieved",
                tenant_id=tenant_id,
                count=len(items)
            )

            return items

        except Exception as e:
            logger.error(
                "get_active_items_failed",
                tenant_id=tenant_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_item(self, item_id: str) -> CatalogItem:
        """
        Get a single catalog item by ID, whatever its status.

        Raises:
            CatalogItemNotFoundError: If the item doesn't exist
        """
        logger.debug("getting_item", item_id=item_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", item_id)
                .execute()
            )

            if not result.data:
                raise CatalogItemNotFoundError(item_id)

            return CatalogItem(**result.data[0])

        except CatalogItemNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "get_item_failed",
                item_id=item_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    # ===================
    # CUSTOMER DIRECTORY
    # ===================

    def get_customer_directory(self, tenant_id: str) -> list[CustomerRecord]:
        """
        Get the tenant's customers (users with the customer role).

        Returns:
            Customers ordered by id
        """
        logger.debug("getting_customer_directory", tenant_id=tenant_id)

        try:
            result = (
                self.db.table(self.users_table)
                .select(CUSTOMER_COLUMNS)
                .eq("tenant_id", tenant_id)
                .eq("role", CUSTOMER_ROLE)
                .order("id")
                .execute()
            )

            customers = [CustomerRecord(**row) for row in result.data]

            logger.info(
                "customer_directory_retrieved",
                tenant_id=tenant_id,
                count=len(customers)
            )

            return customers

        except Exception as e:
            logger.error(
                "get_customer_directory_failed",
                tenant_id=tenant_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))


# Singleton instance
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
