"""Checkout routes"""

from fastapi import APIRouter, HTTPException, Depends

from ..cart import CartEngine
from ..core.state import StorefrontState
from ..models.order import CheckoutRequest, CheckoutResponse
from ..security import AuthContext, get_cart, get_state, require_user
from ..services.errors import CheckoutError

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    ctx: AuthContext = Depends(require_user),
    cart: CartEngine = Depends(get_cart),
    state: StorefrontState = Depends(get_state),
):
    """
    Place an order from the session's cart.

    Cash on delivery orders go straight to processing; online orders wait
    for a payment proof.
    """
    async with ctx.session.checkout_lock:
        try:
            result = await state.checkout.place_order(
                cart,
                ctx.user,
                ctx.token,
                payment_method=request.payment_method,
                notes=request.notes,
            )
        except CheckoutError as e:
            raise HTTPException(status_code=400, detail=e.message)

    message = "Order placed"
    if not result.complete:
        message = f"Order placed, but {len(result.failed_product_ids)} item(s) could not be added"

    return CheckoutResponse(
        success=True,
        order=result.order,
        failed_product_ids=result.failed_product_ids,
        message=message,
    )
