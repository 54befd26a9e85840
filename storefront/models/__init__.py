# Storefront Models

from .product import Product, ProductForm, QuickProductForm, ProductListResponse
from .cart import ProductSnapshot, CartLine, AddToCartRequest, UpdateCartItemRequest, CartResponse
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentStatus,
    PaymentMethod,
    CheckoutRequest,
    CheckoutResponse,
    OrderDetailResponse,
    OrderStatusUpdate,
    PaymentReview,
)
from .user import (
    User,
    UserRole,
    UserSummary,
    RegisterRequest,
    LoginRequest,
    AccountUpdate,
    RoleUpdate,
    MeResponse,
)
from .admin import (
    AdminOrderList,
    AdminPaymentList,
    AdminProductList,
    AdminUserList,
    AdminLiveList,
    AdminLiveDetail,
)
from .live import (
    Live,
    LiveStatus,
    LiveProduct,
    LiveForm,
    LiveStatusUpdate,
    LiveListResponse,
    LiveDetailResponse,
)

__all__ = [
    "Product",
    "ProductForm",
    "QuickProductForm",
    "ProductListResponse",
    "ProductSnapshot",
    "CartLine",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
    "CheckoutRequest",
    "CheckoutResponse",
    "OrderDetailResponse",
    "OrderStatusUpdate",
    "PaymentReview",
    "User",
    "UserRole",
    "UserSummary",
    "RegisterRequest",
    "LoginRequest",
    "AccountUpdate",
    "RoleUpdate",
    "MeResponse",
    "Live",
    "LiveStatus",
    "LiveProduct",
    "LiveForm",
    "LiveStatusUpdate",
    "LiveListResponse",
    "LiveDetailResponse",
    "AdminOrderList",
    "AdminPaymentList",
    "AdminProductList",
    "AdminUserList",
    "AdminLiveList",
    "AdminLiveDetail",
]
