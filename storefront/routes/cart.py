"""Cart API routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from ..cart import CartEngine
from ..core.state import StorefrontState
from ..gateway import Query
from ..models.cart import AddToCartRequest, CartResponse, UpdateCartItemRequest
from ..models.product import Product
from ..security import get_cart, get_state, optional_token
from ..services.formatting import format_price
from .errors import ensure_ok

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def cart_response(cart: CartEngine, currency: str, message: Optional[str] = None) -> CartResponse:
    return CartResponse(
        items=cart.items,
        total_items=cart.total_items,
        total_amount=cart.total_amount,
        formatted_total=format_price(cart.total_amount, currency),
        durably_saved=cart.durably_saved,
        message=message,
    )


@router.get("", response_model=CartResponse)
async def get_cart_contents(
    cart: CartEngine = Depends(get_cart),
    state: StorefrontState = Depends(get_state),
):
    """Get the session's cart"""
    return cart_response(cart, state.settings.currency)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    cart: CartEngine = Depends(get_cart),
    state: StorefrontState = Depends(get_state),
    token: Optional[str] = Depends(optional_token),
):
    """Add one unit of a product, snapshotting its current details"""
    result = await state.gateway.query("products", Query().eq("id", request.product_id), token)
    rows = ensure_ok(result, "Failed to load product")
    if not rows:
        raise HTTPException(status_code=404, detail="Product not found")

    product = Product.model_validate(rows[0])
    if not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")

    cart.add_to_cart(product)
    return cart_response(cart, state.settings.currency, message=f"Added {product.name} to cart")


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    cart: CartEngine = Depends(get_cart),
    state: StorefrontState = Depends(get_state),
):
    """Set a line's quantity; zero or below removes it"""
    cart.update_quantity(product_id, request.quantity)
    return cart_response(cart, state.settings.currency, message="Cart updated")


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    cart: CartEngine = Depends(get_cart),
    state: StorefrontState = Depends(get_state),
):
    """Remove a line; removing an absent product is not an error"""
    cart.remove_from_cart(product_id)
    return cart_response(cart, state.settings.currency, message="Item removed")


@router.delete("", response_model=CartResponse)
async def clear_cart(
    cart: CartEngine = Depends(get_cart),
    state: StorefrontState = Depends(get_state),
):
    """Clear all items from cart"""
    cart.clear_cart()
    return cart_response(cart, state.settings.currency, message="Cart cleared")
