"""Cart package: cart value helpers and the per-user cart manager."""
from .models import Cart, CartUpdate, carts_equal, normalize_cart
from .service import CartManager, UserLocks

__all__ = [
    "Cart",
    "CartUpdate",
    "CartManager",
    "UserLocks",
    "carts_equal",
    "normalize_cart",
]
