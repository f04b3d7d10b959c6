"""
Routes package.
"""

from .auth import router as auth_router
from .products import router as products_router
from .bulk_edit import router as bulk_edit_router
from .update_price import router as update_price_router

__all__ = [
    "auth_router",
    "products_router",
    "bulk_edit_router",
    "update_price_router",
]
