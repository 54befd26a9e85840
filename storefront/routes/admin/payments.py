"""Admin payment review"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends

from ...core.state import StorefrontState
from ...gateway import Query as TableQuery
from ...models.admin import AdminPaymentList
from ...models.order import Payment, PaymentReview, PaymentStatus
from ...security import AuthContext, get_state, require_admin
from ...services.errors import PaymentError
from ...services.formatting import format_status
from ...services.listing import filter_by_status, filter_label, matches_search, sort_newest_first
from ..errors import ensure_ok

router = APIRouter(prefix="/api/admin/payments", tags=["Admin"])

ALL_PAYMENT_STATUSES = [s.value for s in PaymentStatus]


def _search_fields(payment: Payment) -> list[Optional[str]]:
    order = payment.orders
    customer = order.users if order else None
    return [
        order.id if order else payment.order_id,
        customer.full_name if customer else None,
        customer.email if customer else None,
        payment.payment_method,
    ]


@router.get("", response_model=AdminPaymentList)
async def list_payments(
    status: list[str] = Query(["pending"], description="Statuses to show"),
    q: Optional[str] = Query(None, description="Search order id, customer and payment method"),
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """Payment submissions with their order and customer; pending ones by default"""
    result = await state.gateway.query(
        "payments",
        TableQuery(select="*, orders(*, users(full_name, email))"),
        ctx.token,
    )
    rows = ensure_ok(result, "Failed to load payments")
    payments = sort_newest_first(Payment.model_validate(row) for row in rows or [])

    shown = [
        p for p in filter_by_status(payments, status, ALL_PAYMENT_STATUSES, lambda p: p.status)
        if matches_search(q, *_search_fields(p))
    ]

    return AdminPaymentList(
        payments=shown,
        total=len(payments),
        shown=len(shown),
        filter_label=filter_label(status, ALL_PAYMENT_STATUSES, format_status),
    )


@router.post("/{payment_id}/review")
async def review_payment(
    payment_id: str,
    request: PaymentReview,
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """Confirm or reject a payment; confirming also marks its order paid"""
    result = await state.gateway.query("payments", TableQuery().eq("id", payment_id), ctx.token)
    rows = ensure_ok(result, "Failed to load payment")
    if not rows:
        raise HTTPException(status_code=404, detail="Payment not found")
    payment = Payment.model_validate(rows[0])

    try:
        await state.payments.review(payment.id, payment.order_id, request.status, ctx.user, ctx.token)
    except PaymentError as e:
        status_code = 400 if e.code == "invalid_status" else 502
        raise HTTPException(status_code=status_code, detail=e.message)

    return {"message": f"Payment {request.status.value}"}
