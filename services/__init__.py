"""
Business logic services.

Each service handles one domain area.
"""

from services.catalog_service import CatalogService, get_catalog_service
from services.alias_service import AliasService, get_alias_service
from services.order_service import OrderService, get_order_service
from services.order_import_service import OrderImportService, get_order_import_service
from services.reconciliation_service import ReconciliationService, get_reconciliation_service
from services.product_matcher import match_product, suggest_items, search_items
from services.customer_matcher import match_customer

__all__ = [
    "CatalogService",
    "get_catalog_service",
    "AliasService",
    "get_alias_service",
    "OrderService",
    "get_order_service",
    "OrderImportService",
    "get_order_import_service",
    "ReconciliationService",
    "get_reconciliation_service",
    "match_product",
    "suggest_items",
    "search_items",
    "match_customer",
]
