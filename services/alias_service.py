"""
Item name alias store.

Remembers that a free-text product name means a specific catalog item
for one tenant, so later imports of the same name match exactly.
Names are stored normalized; (tenant_id, alias_name) is unique and a
repeated upsert re-points the alias.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.alias import ItemAlias
from exceptions import (
    AliasNotFoundError,
    CatalogItemNotFoundError,
    DatabaseError,
    ValidationError,
)
from services.catalog_service import CatalogService
from utils.text_utils import normalize_product_name

logger = structlog.get_logger(__name__)


class AliasService:
    """
    Alias CRUD scoped by tenant.
    """

    def __init__(self, catalog_service: Optional[CatalogService] = None):
        self.db = get_supabase_client()
        self.table = "item_name_aliases"
        self.catalog = catalog_service or CatalogService()

    # ===================
    # READ OPERATIONS
    # ===================

    def get_alias(self, tenant_id: str, name: str) -> Optional[ItemAlias]:
        """
        Look up an alias by raw name.

        Args:
            tenant_id: Tenant UUID
            name: Product name as it arrived; normalized before lookup

        Returns:
            ItemAlias or None if no alias exists
        """
        alias_name = normalize_product_name(name)
        if not alias_name:
            return None

        logger.debug("getting_alias", tenant_id=tenant_id, alias_name=alias_name)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("tenant_id", tenant_id)
                .eq("alias_name", alias_name)
                .execute()
            )

            if not result.data:
                return None

            return ItemAlias(**result.data[0])

        except Exception as e:
            logger.error(
                "get_alias_failed",
                tenant_id=tenant_id,
                alias_name=alias_name,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def list_aliases(self, tenant_id: str) -> list[ItemAlias]:
        """Get all aliases for a tenant, ordered by alias name."""
        logger.debug("listing_aliases", tenant_id=tenant_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("tenant_id", tenant_id)
                .order("alias_name")
                .execute()
            )

            return [ItemAlias(**row) for row in result.data]

        except Exception as e:
            logger.error(
                "list_aliases_failed",
                tenant_id=tenant_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_alias_map(self, tenant_id: str) -> dict[str, str]:
        """
        Aliases as a lookup table for the product matcher.

        Returns:
            Dict of normalized name -> item_id
        """
        aliases = self.list_aliases(tenant_id)
        return {alias.alias_name: alias.item_id for alias in aliases}

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upsert_alias(self, tenant_id: str, item_id: str, original_name: str) -> ItemAlias:
        """
        Remember that `original_name` means `item_id`.

        Args:
            tenant_id: Tenant UUID
            item_id: Catalog item the name resolves to
            original_name: Name exactly as it appeared in the order

        Returns:
            The stored alias

        Raises:
            ValidationError: If the name normalizes to nothing
        """
        alias_name = normalize_product_name(original_name)
        if not alias_name:
            raise ValidationError(
                "Alias name cannot be empty",
                code="ALIAS_NAME_EMPTY",
                details={"original_name": original_name}
            )

        logger.info(
            "upserting_alias",
            tenant_id=tenant_id,
            alias_name=alias_name,
            item_id=item_id
        )

        row = {
            "tenant_id": tenant_id,
            "alias_name": alias_name,
            "original_name": original_name,
            "item_id": item_id,
        }

        try:
            result = (
                self.db.table(self.table)
                .upsert(row, on_conflict="tenant_id,alias_name")
                .execute()
            )

            alias = ItemAlias(**result.data[0]) if result.data else ItemAlias(**row)

            logger.info(
                "alias_upserted",
                alias_id=alias.id,
                alias_name=alias_name
            )

            return alias

        except Exception as e:
            logger.error(
                "upsert_alias_failed",
                tenant_id=tenant_id,
                alias_name=alias_name,
                error=str(e)
            )
            raise DatabaseError("upsert", str(e))

    def create_alias(self, tenant_id: str, item_id: str, original_name: str) -> ItemAlias:
        """
        Remember a name for an item after checking the item is the tenant's.

        Raises:
            CatalogItemNotFoundError: If the item doesn't exist for this tenant
            ValidationError: If the name normalizes to nothing
        """
        item = self.catalog.get_item(item_id)
        if item.tenant_id and item.tenant_id != tenant_id:
            logger.warning(
                "alias_item_wrong_tenant",
                tenant_id=tenant_id,
                item_id=item_id
            )
            raise CatalogItemNotFoundError(item_id)

        return self.upsert_alias(tenant_id, item.id, original_name)

    def delete_alias(self, tenant_id: str, alias_id: str) -> bool:
        """
        Delete one of the tenant's aliases by ID.

        Raises:
            AliasNotFoundError: If nothing was deleted
        """
        logger.info("deleting_alias", tenant_id=tenant_id, alias_id=alias_id)

        try:
            result = (
                self.db.table(self.table)
                .delete()
                .eq("tenant_id", tenant_id)
                .eq("id", alias_id)
                .execute()
            )

            if not result.data:
                raise AliasNotFoundError(alias_id)

            logger.info("alias_deleted", alias_id=alias_id)
            return True

        except AliasNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "delete_alias_failed",
                alias_id=alias_id,
                error=str(e)
            )
            raise DatabaseError("delete", str(e))


# Singleton instance
_alias_service: Optional[AliasService] = None


def get_alias_service() -> AliasService:
    """Get or create AliasService instance."""
    global _alias_service
    if _alias_service is None:
        _alias_service = AliasService()
    return _alias_service
