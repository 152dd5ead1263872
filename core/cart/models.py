"""Cart value helpers.

A cart is a sparse ``dict[str, int]`` kept on the user record. Zero and
absent are the same state, so comparisons go through ``normalize_cart``.
"""
from dataclasses import dataclass, field
from typing import Mapping, Optional

from core.errors import StateError

Cart = dict[str, int]


def normalize_cart(cart: Mapping[str, int]) -> Cart:
    """Drop zero-quantity entries."""
    return {key: qty for key, qty in cart.items() if qty}


def carts_equal(a: Mapping[str, int], b: Mapping[str, int]) -> bool:
    """Equality that treats an explicit 0 the same as a missing key."""
    return normalize_cart(a) == normalize_cart(b)


@dataclass
class CartUpdate:
    """Outcome of a cart mutation.

    ``error`` is set when the mutation was refused (e.g. NothingToRemove);
    ``cart`` then holds the unchanged state.
    """
    cart: Cart = field(default_factory=dict)
    changed: bool = False
    error: Optional[StateError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
