"""
Jewelry Storefront Application

Shopper catalog, cart, checkout and order tracking, plus staff workflows
for orders, payments, products, users and live-selling sessions. Data lives
in a hosted REST + storage + auth backend.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .cart import CartStorage
from .core.config import Settings, get_settings
from .core.state import StorefrontState
from .gateway import Query
from .models.live import Live, LiveStatus
from .models.product import Product
from .routes import (
    admin,
    account_router,
    auth_router,
    cart_router,
    checkout_router,
    lives_router,
    orders_router,
    products_router,
)
from .services.formatting import format_price
from .services.listing import sort_lives

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

FEATURED_PRODUCT_COUNT = 6

static_dir = os.path.join(os.path.dirname(__file__), "static")
templates_dir = os.path.join(os.path.dirname(__file__), "templates")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    cart_storage: Optional[CartStorage] = None,
) -> FastAPI:
    """
    Build the storefront application.

    Args:
        settings: Defaults to the environment-loaded settings
        transport: httpx transport for the backend client (tests use MockTransport)
        cart_storage: Overrides the configured cart storage backend
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info(f"{settings.app_name} starting up...")
        if not settings.backend_configured:
            logger.warning("Backend API key not set; requests will be rejected by the backend")
        app.state.storefront = StorefrontState.create(settings, transport=transport, cart_storage=cart_storage)
        logger.info(f"Cart storage: {settings.cart_storage_backend}, order item failures: {settings.order_item_failure_policy}")
        yield
        await app.state.storefront.close()
        logger.info(f"{settings.app_name} shutting down...")

    app = FastAPI(
        title=settings.app_name,
        description="Direct-to-consumer jewelry storefront with live-selling sessions",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if os.path.exists(static_dir):
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    templates = Jinja2Templates(directory=templates_dir) if os.path.exists(templates_dir) else None

    # Shopper routes
    app.include_router(products_router)
    app.include_router(lives_router)
    app.include_router(cart_router)
    app.include_router(auth_router)
    app.include_router(account_router)
    app.include_router(checkout_router)
    app.include_router(orders_router)

    # Staff routes
    app.include_router(admin.orders_router)
    app.include_router(admin.payments_router)
    app.include_router(admin.products_router)
    app.include_router(admin.users_router)
    app.include_router(admin.lives_router)

    @app.get("/")
    async def home(request: Request):
        """Storefront home page with featured products and live sessions"""
        state: StorefrontState = request.app.state.storefront

        # Read-only: sessions are only created by the API routes
        cookie = request.cookies.get(settings.session_cookie_name)
        session = state.sessions.get_session(cookie) if cookie else None
        token = await state.auth.ensure_fresh(session) if session else None
        cart_count = state.cart_for(session).total_items if session else 0

        products_result = await state.gateway.query(
            "products",
            Query().eq("is_active", True).order_by("created_at", descending=True).limit_to(FEATURED_PRODUCT_COUNT),
            token,
        )
        lives_result = await state.gateway.query(
            "lives",
            Query().in_("status", [LiveStatus.LIVE.value, LiveStatus.UPCOMING.value]),
            token,
        )
        if not products_result.ok:
            logger.error(f"Failed to load featured products: {products_result.error.message}")
        if not lives_result.ok:
            logger.error(f"Failed to load live sessions: {lives_result.error.message}")

        products = [Product.model_validate(row) for row in products_result.data or []]
        lives = sort_lives(Live.model_validate(row) for row in lives_result.data or [])
        user = session.user if session else None

        if templates:
            return templates.TemplateResponse(
                request,
                "index.html",
                {
                    "title": settings.app_name,
                    "user": user,
                    "cart_count": cart_count,
                    "products": products,
                    "lives": lives,
                    "format_price": lambda amount: format_price(amount, settings.currency),
                },
            )
        return {
            "message": settings.app_name,
            "user": user.full_name if user else None,
            "cart_count": cart_count,
            "featured_products": [p.model_dump(mode="json") for p in products],
            "lives": [l.model_dump(mode="json") for l in lives],
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "storefront",
            "backend_configured": settings.backend_configured,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
