"""Admin order management"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends

from ...core.state import StorefrontState
from ...gateway import Query as TableQuery
from ...models.admin import AdminOrderList
from ...models.order import Order, OrderStatus, OrderStatusUpdate
from ...security import AuthContext, get_state, require_admin
from ...services.formatting import format_status
from ...services.listing import filter_by_status, filter_label, matches_search, sort_newest_first
from ..errors import ensure_ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/orders", tags=["Admin"])

ALL_ORDER_STATUSES = [s.value for s in OrderStatus]


@router.get("", response_model=AdminOrderList)
async def list_orders(
    status: Optional[list[str]] = Query(None, description="Statuses to show; omit for all"),
    q: Optional[str] = Query(None, description="Search order id, customer name and email"),
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """All orders with their customer, newest first"""
    result = await state.gateway.query("orders", TableQuery(select="*, users(full_name, email)"), ctx.token)
    rows = ensure_ok(result, "Failed to load orders")
    orders = sort_newest_first(Order.model_validate(row) for row in rows or [])

    selected = status if status is not None else ALL_ORDER_STATUSES
    shown = [
        o for o in filter_by_status(orders, selected, ALL_ORDER_STATUSES, lambda o: o.status)
        if matches_search(q, o.id, o.users.full_name if o.users else None, o.users.email if o.users else None)
    ]

    return AdminOrderList(
        orders=shown,
        total=len(orders),
        shown=len(shown),
        filter_label=filter_label(selected, ALL_ORDER_STATUSES, format_status),
    )


@router.patch("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdate,
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """Move an order to any status"""
    result = await state.gateway.update("orders", {"status": request.status.value}, {"id": order_id}, ctx.token)
    row = ensure_ok(result, "Failed to update order")
    if not row:
        raise HTTPException(status_code=404, detail="Order not found")

    logger.info(f"Order {order_id} set to {request.status.value} by {ctx.user.id}")
    return Order.model_validate(row)
