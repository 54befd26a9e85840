"""Application state created at startup and passed to routes"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..cart import CartEngine, CartStorage, create_cart_storage
from ..gateway import GatewayClient
from ..services.auth import AuthService
from ..services.catalog import CatalogService
from ..services.checkout import CheckoutService
from ..services.lives import LiveService
from ..services.payments import PaymentService
from .config import Settings
from .session import BrowsingSession, SessionManager

logger = logging.getLogger(__name__)


@dataclass
class StorefrontState:
    """Everything a request handler needs; one instance per running app"""
    settings: Settings
    gateway: GatewayClient
    sessions: SessionManager
    cart_storage: CartStorage
    auth: AuthService
    checkout: CheckoutService
    payments: PaymentService
    catalog: CatalogService
    lives: LiveService

    @classmethod
    def create(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cart_storage: Optional[CartStorage] = None,
    ) -> "StorefrontState":
        gateway = GatewayClient(
            base_url=settings.backend_url,
            anon_key=settings.backend_anon_key,
            timeout=settings.gateway_timeout_seconds,
            transport=transport,
        )
        catalog = CatalogService(gateway, image_bucket=settings.product_image_bucket)
        return cls(
            settings=settings,
            gateway=gateway,
            sessions=SessionManager(),
            cart_storage=cart_storage or create_cart_storage(
                settings.cart_storage_backend, settings.cart_storage_dir
            ),
            auth=AuthService(
                gateway,
                jwt_secret=settings.jwt_secret,
                refresh_margin_seconds=settings.token_refresh_margin_seconds,
            ),
            checkout=CheckoutService(
                gateway,
                failure_policy=settings.order_item_failure_policy,
                decrement_stock=settings.decrement_stock_on_checkout,
            ),
            payments=PaymentService(gateway, proof_bucket=settings.payment_proof_bucket),
            catalog=catalog,
            lives=LiveService(gateway, catalog),
        )

    def cart_for(self, session: BrowsingSession) -> CartEngine:
        """The session's cart, rehydrated from storage on first use"""
        if session.cart is None:
            session.cart = CartEngine(self.cart_storage, key=session.session_id)
        return session.cart

    async def close(self) -> None:
        await self.gateway.close()
        logger.info(f"Closed gateway client, {len(self.sessions.sessions)} sessions dropped")
