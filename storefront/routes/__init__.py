# Storefront Routes

from .products import router as products_router
from .lives import router as lives_router
from .cart import router as cart_router
from .auth import router as auth_router
from .account import router as account_router
from .checkout import router as checkout_router
from .orders import router as orders_router
from . import admin

__all__ = [
    "products_router",
    "lives_router",
    "cart_router",
    "auth_router",
    "account_router",
    "checkout_router",
    "orders_router",
    "admin",
]
