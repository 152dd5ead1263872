"""
Cart Router

Every endpoint sits behind the auth gate (``require_user``); the user id
comes from the verified token, never from the request body.
"""
from fastapi import APIRouter, Depends

from core.auth.dependencies import require_user
from core.routers.deps import get_cart_manager
from .models import CartItemRequest, CartResponse

router = APIRouter(tags=["cart"])


@router.get("/getcart", response_model=CartResponse)
@router.post("/getcart", response_model=CartResponse)
async def get_cart(user_id: str = Depends(require_user)):
    """Current cart; items never added are simply absent."""
    cart = await get_cart_manager().get_cart(user_id)
    return CartResponse(cartData=cart)


@router.post("/addtocart", response_model=CartResponse)
async def add_to_cart(request: CartItemRequest, user_id: str = Depends(require_user)):
    """Increment an item's quantity by one."""
    cart = await get_cart_manager().add_item(user_id, request.item_id)
    return CartResponse(cartData=cart)


@router.post("/removefromcart", response_model=CartResponse)
async def remove_from_cart(request: CartItemRequest, user_id: str = Depends(require_user)):
    """Decrement an item's quantity by one; NothingToRemove when it is already 0."""
    update = await get_cart_manager().remove_item(user_id, request.item_id)
    if update.error is not None:
        raise update.error
    return CartResponse(cartData=update.cart)
