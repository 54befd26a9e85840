"""Order and payment models"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from .product import Product
from .user import UserSummary


class OrderStatus(str, Enum):
    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    PAYMENT_SUBMITTED = "payment_submitted"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    """Checkout payment choice"""
    ONLINE = "online"
    COD = "cod"


class Order(BaseModel):
    """Order row"""
    id: str
    user_id: str
    status: OrderStatus
    total_amount: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    users: Optional[UserSummary] = None


class OrderItem(BaseModel):
    """Order line item row"""
    id: str
    order_id: str
    product_id: str
    quantity: int
    unit_price: float
    products: Optional[Product] = None


class Payment(BaseModel):
    """Payment proof row"""
    id: str
    order_id: str
    amount: float
    payment_method: str
    proof_url: str
    status: PaymentStatus
    confirmed_by: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    orders: Optional[Order] = None


class CheckoutRequest(BaseModel):
    """Request to place an order from the cart"""
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    notes: Optional[str] = None


class CheckoutResponse(BaseModel):
    """Response from checkout"""
    success: bool
    order: Optional[Order] = None
    failed_product_ids: list[str] = []
    message: Optional[str] = None


class OrderDetailResponse(BaseModel):
    """Order with its items and payments"""
    order: Order
    items: list[OrderItem]
    payments: list[Payment]
    status_label: str


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class PaymentReview(BaseModel):
    status: PaymentStatus = Field(description="confirmed or rejected")
