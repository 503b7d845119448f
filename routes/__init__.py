"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.quote import router as quote_router
from routes.catalog import router as catalog_router

__all__ = [
    "quote_router",
    "catalog_router",
]
