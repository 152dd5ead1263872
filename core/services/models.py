"""Database Models - Pydantic models for stored entities."""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserIdentity(BaseModel):
    """One registered shopper.

    ``cart`` is a sparse item-key -> quantity mapping. A key stored with 0 and
    an absent key both mean "not in cart".
    """
    model_config = ConfigDict(extra="ignore")  # Ignore unknown fields from DB

    id: Optional[str] = None  # Assigned by the store on create
    display_name: Optional[str] = None
    email: str
    password_hash: str = Field(repr=False)
    cart: dict[str, int] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @field_validator("cart", mode="before")
    @classmethod
    def normalize_cart(cls, v):
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("cart must be a mapping")
        normalized = {}
        for key, qty in v.items():
            qty = int(qty)
            if qty < 0:
                raise ValueError(f"negative quantity for item {key!r}")
            normalized[str(key)] = qty
        return normalized

    def quantity_of(self, item_key: str) -> int:
        """Quantity for item_key; absent keys are 0."""
        return self.cart.get(item_key, 0)


class Product(BaseModel):
    """Catalog product."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    image: str
    category: str
    new_price: float
    old_price: float
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    available: bool = True
