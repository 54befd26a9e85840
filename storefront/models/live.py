"""Live-selling session models"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

from .product import Product


class LiveStatus(str, Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    ENDED = "ended"


class Live(BaseModel):
    """Live-selling session row"""
    id: str
    title: str
    slug: str
    cover_image: Optional[str] = None
    scheduled_at: datetime
    facebook_link: Optional[str] = None
    status: LiveStatus = LiveStatus.UPCOMING
    created_at: Optional[datetime] = None


class LiveProduct(BaseModel):
    """Link between a live session and a product"""
    id: Optional[str] = None
    live_id: str
    product_id: str


class LiveForm(BaseModel):
    """Admin create/edit live session form"""
    title: str
    scheduled_at: datetime
    facebook_link: Optional[str] = None
    status: LiveStatus = LiveStatus.UPCOMING
    cover_image: Optional[str] = None
    product_ids: list[str] = []


class LiveStatusUpdate(BaseModel):
    status: LiveStatus


class LiveListResponse(BaseModel):
    """Public live sessions grouped by status"""
    live: list[Live]
    upcoming: list[Live]
    ended: list[Live]


class LiveDetailResponse(BaseModel):
    live: Live
    products: list[Product]
