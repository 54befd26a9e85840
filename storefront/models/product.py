"""Catalog product models"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    name: str
    description: Optional[str] = None
    price: float = Field(ge=0)
    image_url: Optional[str] = None
    images: Optional[list[str]] = None
    category: Optional[str] = None
    stock: int = Field(ge=0, default=0)
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductForm(BaseModel):
    """Admin create/edit product form"""
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    category: Optional[str] = None
    stock: int = Field(ge=0, default=0)
    existing_images: list[str] = []


class QuickProductForm(BaseModel):
    """Product created inline from the live session form"""
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    category: Optional[str] = None


class ProductListResponse(BaseModel):
    """Product listing response"""
    products: list[Product]
    total: int
    shown: int
