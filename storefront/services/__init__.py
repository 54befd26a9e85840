# Storefront services

from .auth import AuthService
from .checkout import CheckoutService, CheckoutResult
from .payments import PaymentService
from .catalog import CatalogService
from .lives import LiveService, generate_slug
from .errors import StorefrontError, AuthError, CheckoutError, PaymentError, CatalogError

__all__ = [
    "AuthService",
    "CheckoutService",
    "CheckoutResult",
    "PaymentService",
    "CatalogService",
    "LiveService",
    "generate_slug",
    "StorefrontError",
    "AuthError",
    "CheckoutError",
    "PaymentError",
    "CatalogError",
]
