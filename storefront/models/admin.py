"""Admin listing responses"""

from pydantic import BaseModel

from .live import Live
from .order import Order, Payment
from .product import Product
from .user import User


class AdminListing(BaseModel):
    """Counts and filter label shown above every admin list"""
    total: int
    shown: int
    filter_label: str


class AdminOrderList(AdminListing):
    orders: list[Order]


class AdminPaymentList(AdminListing):
    payments: list[Payment]


class AdminProductList(AdminListing):
    products: list[Product]


class AdminUserList(AdminListing):
    users: list[User]


class AdminLiveList(AdminListing):
    lives: list[Live]


class AdminLiveDetail(BaseModel):
    """Live session with its linked product ids, for the edit form"""
    live: Live
    product_ids: list[str]
