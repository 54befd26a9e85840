"""Admin product management"""

import time
import logging
import secrets
from typing import Optional

from ..gateway import GatewayClient
from ..models.product import Product, ProductForm, QuickProductForm
from .errors import CatalogError
from .uploads import UploadedFile, file_extension

logger = logging.getLogger(__name__)


class CatalogService:
    """Creates and edits catalog products"""

    def __init__(self, gateway: GatewayClient, image_bucket: str = "productImages"):
        self.gateway = gateway
        self.image_bucket = image_bucket

    async def upload_image(self, image: UploadedFile, token: str, name: Optional[str] = None) -> str:
        path = name or f"{int(time.time() * 1000)}-{secrets.token_hex(5)}.{file_extension(image.filename)}"
        upload = await self.gateway.upload_file(
            self.image_bucket,
            path,
            image.content,
            content_type=image.content_type,
            token=token,
        )
        if not upload.ok:
            logger.error(f"Failed to upload image {image.filename}: {upload.error.message}")
            raise CatalogError(upload.error.message, code=upload.error.code)
        return upload.url

    async def save_product(
        self,
        form: ProductForm,
        new_images: list[UploadedFile],
        token: str,
        product_id: Optional[str] = None,
    ) -> Product:
        """
        Insert or update a product.

        New images are uploaded first and appended after the kept ones; the
        first image becomes the main image_url.
        """
        uploaded_urls = [await self.upload_image(image, token) for image in new_images]
        all_images = [*form.existing_images, *uploaded_urls]

        product_data = {
            "name": form.name,
            "description": form.description or None,
            "price": form.price,
            "image_url": all_images[0] if all_images else None,
            "images": all_images or None,
            "category": form.category or None,
            "stock": form.stock,
            "is_active": True,
        }

        if product_id:
            result = await self.gateway.update("products", product_data, {"id": product_id}, token)
        else:
            result = await self.gateway.insert("products", product_data, token)

        if not result.ok or not result.data:
            message = result.error.message if result.error else "Product not found"
            raise CatalogError(message, code=result.error.code if result.error else "not_found")

        product = Product.model_validate(result.data)
        logger.info(f"{'Updated' if product_id else 'Created'} product {product.id} ({product.name})")
        return product

    async def quick_create(self, form: QuickProductForm, token: str) -> Product:
        """Create an active product with no stock, from the live session form"""
        result = await self.gateway.insert(
            "products",
            {
                "name": form.name,
                "description": form.description or None,
                "price": form.price,
                "category": form.category or None,
                "stock": 0,
                "is_active": True,
            },
            token,
        )
        if not result.ok:
            logger.error(f"Failed to create product: {result.error.message}")
            raise CatalogError(result.error.message, code=result.error.code)
        return Product.model_validate(result.data)

    async def set_active(self, product_id: str, is_active: bool, token: str) -> Product:
        result = await self.gateway.update("products", {"is_active": is_active}, {"id": product_id}, token)
        if not result.ok or not result.data:
            message = result.error.message if result.error else "Product not found"
            raise CatalogError(message, code=result.error.code if result.error else "not_found")
        return Product.model_validate(result.data)
