"""Manual payment proof submission and review"""

import time
import logging
from datetime import datetime, timezone

from ..gateway import GatewayClient
from ..models.order import Order, OrderStatus, Payment, PaymentStatus
from ..models.user import User
from .errors import PaymentError
from .uploads import file_extension

logger = logging.getLogger(__name__)


class PaymentService:
    """Proof-of-transfer payments"""

    def __init__(self, gateway: GatewayClient, proof_bucket: str = "payment-proofs"):
        self.gateway = gateway
        self.proof_bucket = proof_bucket

    async def submit_proof(
        self,
        order: Order,
        filename: str,
        content: bytes,
        content_type: str,
        payment_method: str,
        token: str,
    ) -> Payment:
        """Upload the proof, record a pending payment, and flag the order"""
        path = f"{order.id}-{int(time.time() * 1000)}.{file_extension(filename)}"

        upload = await self.gateway.upload_file(
            self.proof_bucket,
            path,
            content,
            content_type=content_type,
            token=token,
            public=False,
        )
        if not upload.ok:
            raise PaymentError("Failed to upload file", code=upload.error.code)

        result = await self.gateway.insert(
            "payments",
            {
                "order_id": order.id,
                "amount": order.total_amount,
                "payment_method": payment_method,
                "proof_url": upload.url,
                "status": PaymentStatus.PENDING.value,
            },
            token,
        )
        if not result.ok:
            raise PaymentError(result.error.message, code=result.error.code)

        status_result = await self.gateway.update(
            "orders",
            {"status": OrderStatus.PAYMENT_SUBMITTED.value},
            {"id": order.id},
            token,
        )
        if not status_result.ok:
            logger.warning(f"Payment recorded but order {order.id} status not updated: {status_result.error.message}")

        logger.info(f"Payment proof submitted for order {order.id} via {payment_method}")
        return Payment.model_validate(result.data)

    async def review(
        self,
        payment_id: str,
        order_id: str,
        status: PaymentStatus,
        reviewer: User,
        token: str,
    ) -> None:
        """Confirm or reject a pending payment"""
        if status not in (PaymentStatus.CONFIRMED, PaymentStatus.REJECTED):
            raise PaymentError("Payments can only be confirmed or rejected", code="invalid_status")

        result = await self.gateway.update(
            "payments",
            {
                "status": status.value,
                "confirmed_by": reviewer.id,
                "confirmed_at": datetime.now(timezone.utc).isoformat(),
            },
            {"id": payment_id},
            token,
        )
        if not result.ok:
            raise PaymentError(result.error.message, code=result.error.code)

        if status == PaymentStatus.CONFIRMED:
            order_result = await self.gateway.update(
                "orders",
                {"status": OrderStatus.PAYMENT_CONFIRMED.value},
                {"id": order_id},
                token,
            )
            if not order_result.ok:
                raise PaymentError(order_result.error.message, code=order_result.error.code)

        logger.info(f"Payment {payment_id} {status.value} by {reviewer.id}")
