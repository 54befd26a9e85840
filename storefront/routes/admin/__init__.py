# Staff routes

from .orders import router as orders_router
from .payments import router as payments_router
from .products import router as products_router
from .users import router as users_router
from .lives import router as lives_router

__all__ = [
    "orders_router",
    "payments_router",
    "products_router",
    "users_router",
    "lives_router",
]
