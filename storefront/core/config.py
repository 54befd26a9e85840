"""Storefront Configuration"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Jewelry Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Hosted backend (REST + storage + auth)
    backend_url: str = "http://localhost:54321"
    backend_anon_key: str = ""
    jwt_secret: Optional[str] = None  # Verifies access tokens when set
    gateway_timeout_seconds: float = 30.0
    token_refresh_margin_seconds: int = 300

    # Cart persistence
    cart_storage_backend: Literal["file", "memory"] = "file"
    cart_storage_dir: str = ".carts"
    session_cookie_name: str = "storefront_session"
    session_max_age_hours: int = 24 * 30

    # Checkout
    order_item_failure_policy: Literal["ignore", "report", "rollback"] = "report"
    decrement_stock_on_checkout: bool = False

    # Storage buckets
    payment_proof_bucket: str = "payment-proofs"
    product_image_bucket: str = "productImages"

    currency: str = "PHP"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def backend_configured(self) -> bool:
        """Check if the hosted backend is configured"""
        return all([
            self.backend_url,
            self.backend_anon_key,
        ])


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
