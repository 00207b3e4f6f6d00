"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.imports import router as imports_router
from routes.reconciliation import router as reconciliation_router
from routes.aliases import router as aliases_router

__all__ = [
    "imports_router",
    "reconciliation_router",
    "aliases_router",
]
