"""Cart models"""

from pydantic import BaseModel, Field
from typing import Optional

from .product import Product


class ProductSnapshot(BaseModel):
    """Display fields of a product captured when it was added to the cart"""
    id: str
    name: str
    price: float = Field(ge=0)
    image_url: Optional[str] = None
    stock: int = 0
    category: Optional[str] = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductSnapshot":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
            stock=product.stock,
            category=product.category,
        )


class CartLine(BaseModel):
    """One (product snapshot, quantity) pair in the cart"""
    product: ProductSnapshot
    quantity: int = Field(gt=0)

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


class AddToCartRequest(BaseModel):
    """Request to add a product to the cart"""
    product_id: str


class UpdateCartItemRequest(BaseModel):
    """Request to set a cart line quantity (<= 0 removes the line)"""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response"""
    items: list[CartLine] = []
    total_items: int = 0
    total_amount: float = 0.0
    formatted_total: str = ""
    durably_saved: bool = True
    message: Optional[str] = None
