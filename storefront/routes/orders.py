"""Customer order routes"""

import logging
from fastapi import APIRouter, HTTPException, Depends, File, Form, UploadFile

from ..core.state import StorefrontState
from ..gateway import Query
from ..models.order import Order, OrderDetailResponse, OrderItem, OrderStatus, Payment
from ..security import AuthContext, get_state, require_user
from ..services.errors import PaymentError
from ..services.formatting import format_status
from ..services.listing import sort_newest_first
from .errors import ensure_ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])

# Orders that still accept a payment proof
PAYABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT)


async def load_own_order(state: StorefrontState, ctx: AuthContext, order_id: str) -> Order:
    result = await state.gateway.query(
        "orders",
        Query().eq("id", order_id).eq("user_id", ctx.user.id),
        ctx.token,
    )
    rows = ensure_ok(result, "Failed to load order")
    if not rows:
        raise HTTPException(status_code=404, detail="Order not found")
    return Order.model_validate(rows[0])


@router.get("", response_model=list[Order])
async def list_orders(
    ctx: AuthContext = Depends(require_user),
    state: StorefrontState = Depends(get_state),
):
    """The caller's orders, newest first"""
    result = await state.gateway.query(
        "orders",
        Query().eq("user_id", ctx.user.id).order_by("created_at", descending=True),
        ctx.token,
    )
    rows = ensure_ok(result, "Failed to load orders")
    return sort_newest_first(Order.model_validate(row) for row in rows or [])


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    ctx: AuthContext = Depends(require_user),
    state: StorefrontState = Depends(get_state),
):
    """An order with its line items and payment submissions"""
    order = await load_own_order(state, ctx, order_id)

    items = ensure_ok(
        await state.gateway.query("order_items", Query(select="*, products(*)").eq("order_id", order.id), ctx.token),
        "Failed to load order items",
    )
    payments = ensure_ok(
        await state.gateway.query(
            "payments",
            Query().eq("order_id", order.id).order_by("created_at", descending=True),
            ctx.token,
        ),
        "Failed to load payments",
    )

    return OrderDetailResponse(
        order=order,
        items=[OrderItem.model_validate(row) for row in items or []],
        payments=[Payment.model_validate(row) for row in payments or []],
        status_label=format_status(order.status.value),
    )


@router.post("/{order_id}/payment-proof", response_model=Payment)
async def submit_payment_proof(
    order_id: str,
    file: UploadFile = File(...),
    payment_method: str = Form("GCash"),
    ctx: AuthContext = Depends(require_user),
    state: StorefrontState = Depends(get_state),
):
    """Upload a screenshot of the transfer for staff to review"""
    order = await load_own_order(state, ctx, order_id)
    if order.status not in PAYABLE_STATUSES:
        raise HTTPException(status_code=400, detail="This order is not awaiting payment")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Please choose a file to upload")

    try:
        return await state.payments.submit_proof(
            order,
            file.filename or "proof",
            content,
            file.content_type or "application/octet-stream",
            payment_method,
            ctx.token,
        )
    except PaymentError as e:
        logger.error(f"Payment proof for order {order.id} failed: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)
