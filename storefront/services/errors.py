"""Service-level exceptions"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for storefront service errors"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class AuthError(StorefrontError):
    """Sign-up, sign-in or token refresh failed"""
    pass


class CheckoutError(StorefrontError):
    """Order could not be placed"""
    pass


class PaymentError(StorefrontError):
    """Payment proof could not be submitted or reviewed"""
    pass


class CatalogError(StorefrontError):
    """Product or live session could not be saved"""
    pass
