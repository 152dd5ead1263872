"""
Storefront API Pydantic Models

Request bodies shared by the routers. Field names follow the storefront
client (``username``, ``itemId``, ``new_price``...).
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


# ==================== AUTH MODELS ====================

class SignupRequest(BaseModel):
    username: Optional[str] = Field(None, max_length=100)
    # Kept byte-for-byte: uniqueness is case-sensitive on the stored value
    email: str = Field(min_length=3, max_length=254, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=256)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=254)
    password: str = Field(min_length=1, max_length=256)


class TokenResponse(BaseModel):
    success: bool = True
    token: str


# ==================== CART MODELS ====================

class CartItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1, max_length=64)

    @field_validator("item_id", mode="before")
    @classmethod
    def coerce_item_id(cls, v):
        # Clients send catalog ids as numbers or strings
        if isinstance(v, bool):
            raise ValueError("itemId must be a string or integer")
        if isinstance(v, int):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v


class CartResponse(BaseModel):
    success: bool = True
    cartData: dict[str, int]


# ==================== PRODUCT MODELS ====================

class AddProductRequest(BaseModel):
    name: str = Field(min_length=1)
    image: str = Field(min_length=1)
    category: str = Field(min_length=1)
    new_price: float = Field(ge=0)
    old_price: float = Field(ge=0)


class RemoveProductRequest(BaseModel):
    id: int
