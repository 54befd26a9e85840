"""
Checkout Service

Turns the cart into an order: one orders row, then one order_items row per
cart line inserted sequentially. The backend offers no multi-statement
transaction to this client, so what happens when an item insert fails is
governed by the configured failure policy:

- ignore:   log each failed item and carry on
- report:   carry on, and return the failed product ids to the caller
- rollback: delete what was written, keep the cart, and raise CheckoutError
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..cart import CartEngine
from ..gateway import Filter, GatewayClient, Operator
from ..models.cart import CartLine
from ..models.order import Order, OrderStatus, PaymentMethod
from ..models.user import User
from .errors import CheckoutError

logger = logging.getLogger(__name__)

FAILURE_POLICIES = ("ignore", "report", "rollback")


@dataclass
class CheckoutResult:
    """Outcome of a placed order"""
    order: Order
    failed_product_ids: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_product_ids


def order_status_for(payment_method: PaymentMethod) -> OrderStatus:
    if payment_method == PaymentMethod.COD:
        return OrderStatus.PROCESSING
    return OrderStatus.AWAITING_PAYMENT


def order_notes_for(payment_method: PaymentMethod, notes: Optional[str]) -> Optional[str]:
    if payment_method == PaymentMethod.COD:
        return f"[COD] {notes or ''}".strip()
    return notes or None


class CheckoutService:
    """Places orders from a cart"""

    def __init__(
        self,
        gateway: GatewayClient,
        failure_policy: str = "report",
        decrement_stock: bool = False,
    ):
        if failure_policy not in FAILURE_POLICIES:
            raise ValueError(f"Unknown order item failure policy: {failure_policy}")
        self.gateway = gateway
        self.failure_policy = failure_policy
        self.decrement_stock = decrement_stock

    async def place_order(
        self,
        cart: CartEngine,
        user: User,
        token: str,
        payment_method: PaymentMethod = PaymentMethod.ONLINE,
        notes: Optional[str] = None,
    ) -> CheckoutResult:
        """
        Place an order for everything in the cart.

        The lines read at the start are taken out of the cart afterwards,
        unless the order insert fails or the rollback policy undoes the
        order. Anything added to the cart meanwhile is kept.
        """
        if cart.is_empty:
            raise CheckoutError("Cart is empty", code="empty_cart")

        lines = cart.items
        result = await self.gateway.insert(
            "orders",
            {
                "user_id": user.id,
                "status": order_status_for(payment_method).value,
                "total_amount": round(sum(line.line_total for line in lines), 2),
                "notes": order_notes_for(payment_method, notes),
            },
            token,
        )
        if not result.ok or not result.data:
            message = result.error.message if result.error else "Failed to create order"
            raise CheckoutError(message, code=result.error.code if result.error else None)

        order = Order.model_validate(result.data)

        inserted_item_ids: list[str] = []
        inserted_lines: list[CartLine] = []
        failed_product_ids: list[str] = []

        for line in lines:
            item_result = await self.gateway.insert(
                "order_items",
                {
                    "order_id": order.id,
                    "product_id": line.product.id,
                    "quantity": line.quantity,
                    "unit_price": line.product.price,
                },
                token,
            )
            if item_result.ok:
                inserted_lines.append(line)
                if item_result.data and item_result.data.get("id"):
                    inserted_item_ids.append(item_result.data["id"])
            else:
                logger.warning(
                    f"Failed to create order item for order {order.id}, "
                    f"product {line.product.id}: {item_result.error.message}"
                )
                failed_product_ids.append(line.product.id)

        if failed_product_ids and self.failure_policy == "rollback":
            await self._rollback(order, inserted_item_ids, token)
            raise CheckoutError(
                f"Failed to add {len(failed_product_ids)} item(s) to the order",
                code="partial_order",
            )

        if self.decrement_stock:
            await self._decrement_stock(inserted_lines, token)

        cart.remove_ordered(lines)
        logger.info(
            f"Order {order.id} created: {order.total_amount} for user {user.id} "
            f"({len(inserted_lines)}/{len(lines)} items)"
        )

        if self.failure_policy == "ignore":
            return CheckoutResult(order=order)
        return CheckoutResult(order=order, failed_product_ids=failed_product_ids)

    async def _rollback(self, order: Order, item_ids: list[str], token: str) -> None:
        if item_ids:
            items_result = await self.gateway.delete(
                "order_items", (Filter("id", Operator.IN, tuple(item_ids)),), token
            )
            if not items_result.ok:
                logger.error(f"Rollback of items for order {order.id} failed: {items_result.error.message}")

        order_result = await self.gateway.delete("orders", {"id": order.id}, token)
        if not order_result.ok:
            logger.error(f"Rollback of order {order.id} failed: {order_result.error.message}")
        else:
            logger.warning(f"Rolled back partially written order {order.id}")

    async def _decrement_stock(self, lines: list[CartLine], token: str) -> None:
        # Based on the add-time snapshot; last write wins
        for line in lines:
            new_stock = max(0, line.product.stock - line.quantity)
            result = await self.gateway.update("products", {"stock": new_stock}, {"id": line.product.id}, token)
            if not result.ok:
                logger.warning(f"Failed to decrement stock for product {line.product.id}: {result.error.message}")
