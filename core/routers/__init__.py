"""
FastAPI Routers Package

All routers are included in api/index.py.
"""

from core.routers.auth import router as auth_router
from core.routers.cart import router as cart_router
from core.routers.products import router as products_router

__all__ = [
    "auth_router",
    "cart_router",
    "products_router",
]
