"""Public live-selling session routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from ..core.state import StorefrontState
from ..gateway import GatewayClient, Query
from ..models.live import Live, LiveDetailResponse, LiveListResponse, LiveStatus
from ..models.product import Product
from ..security import get_state, optional_token
from ..services.listing import sort_lives
from .errors import ensure_ok

router = APIRouter(prefix="/api/lives", tags=["Lives"])


async def load_lives(gateway: GatewayClient, token: Optional[str]) -> list[Live]:
    result = await gateway.query("lives", Query().order_by("scheduled_at", descending=True), token)
    rows = ensure_ok(result, "Failed to load live sessions")
    return sort_lives(Live.model_validate(row) for row in rows or [])


@router.get("", response_model=LiveListResponse)
async def list_lives(
    state: StorefrontState = Depends(get_state),
    token: Optional[str] = Depends(optional_token),
):
    """Live sessions grouped by status"""
    lives = await load_lives(state.gateway, token)
    return LiveListResponse(
        live=[l for l in lives if l.status == LiveStatus.LIVE],
        upcoming=[l for l in lives if l.status == LiveStatus.UPCOMING],
        ended=[l for l in lives if l.status == LiveStatus.ENDED],
    )


@router.get("/{slug}", response_model=LiveDetailResponse)
async def get_live(
    slug: str,
    state: StorefrontState = Depends(get_state),
    token: Optional[str] = Depends(optional_token),
):
    """A live session and the active products featured in it"""
    result = await state.gateway.query("lives", Query().eq("slug", slug).limit_to(1), token)
    rows = ensure_ok(result, "Failed to load live session")
    if not rows:
        raise HTTPException(status_code=404, detail="Live session not found")
    live = Live.model_validate(rows[0])

    links = ensure_ok(
        await state.gateway.query("live_products", Query(select="product_id").eq("live_id", live.id), token),
        "Failed to load live products",
    )
    product_ids = [link["product_id"] for link in links or []]
    if not product_ids:
        return LiveDetailResponse(live=live, products=[])

    result = await state.gateway.query(
        "products",
        Query().in_("id", product_ids).eq("is_active", True),
        token,
    )
    rows = ensure_ok(result, "Failed to load live products")
    return LiveDetailResponse(live=live, products=[Product.model_validate(row) for row in rows or []])
