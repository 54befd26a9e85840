"""Admin live-selling session management"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends, File, Form, UploadFile
from pydantic import ValidationError

from ...core.state import StorefrontState
from ...gateway import Query as TableQuery
from ...models.admin import AdminLiveDetail, AdminLiveList
from ...models.live import Live, LiveForm, LiveStatus, LiveStatusUpdate
from ...models.product import Product, QuickProductForm
from ...security import AuthContext, get_state, require_admin
from ...services.errors import CatalogError
from ...services.formatting import format_live_status
from ...services.listing import filter_by_status, filter_label, matches_search, sort_lives
from ..errors import ensure_ok
from ..uploads import read_upload

router = APIRouter(prefix="/api/admin/lives", tags=["Admin"])

ALL_LIVE_STATUSES = [s.value for s in LiveStatus]


def live_form(
    title: str,
    scheduled_at: datetime,
    facebook_link: Optional[str],
    status: LiveStatus,
    cover_image: Optional[str],
    product_ids: Optional[list[str]],
) -> LiveForm:
    try:
        return LiveForm(
            title=title.strip(),
            scheduled_at=scheduled_at,
            facebook_link=facebook_link or None,
            status=status,
            cover_image=cover_image or None,
            product_ids=[pid for pid in product_ids or [] if pid],
        )
    except ValidationError:
        raise HTTPException(status_code=400, detail="Please check the live session details")


def catalog_error(e: CatalogError) -> HTTPException:
    if e.code in ("facebook_link", "slug"):
        return HTTPException(status_code=400, detail=e.message)
    if e.code == "not_found":
        return HTTPException(status_code=404, detail="Live session not found")
    return HTTPException(status_code=502, detail=e.message)


@router.get("", response_model=AdminLiveList)
async def list_lives(
    status: Optional[list[str]] = Query(None, description="Statuses to show; omit for all"),
    q: Optional[str] = Query(None, description="Search title"),
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    result = await state.gateway.query("lives", TableQuery(), ctx.token)
    rows = ensure_ok(result, "Failed to load live sessions")
    lives = sort_lives(Live.model_validate(row) for row in rows or [])

    selected = status if status is not None else ALL_LIVE_STATUSES
    shown = [
        l for l in filter_by_status(lives, selected, ALL_LIVE_STATUSES, lambda l: l.status)
        if matches_search(q, l.title)
    ]

    return AdminLiveList(
        lives=shown,
        total=len(lives),
        shown=len(shown),
        filter_label=filter_label(selected, ALL_LIVE_STATUSES, format_live_status),
    )


@router.get("/products", response_model=list[Product])
async def list_linkable_products(
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """Active products that can be featured in a live session"""
    result = await state.gateway.query(
        "products",
        TableQuery().eq("is_active", True).order_by("name"),
        ctx.token,
    )
    rows = ensure_ok(result, "Failed to load products")
    return [Product.model_validate(row) for row in rows or []]


@router.post("/products", response_model=Product, status_code=201)
async def quick_create_product(
    request: QuickProductForm,
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """Create a product on the spot while building a live session"""
    try:
        return await state.catalog.quick_create(request, ctx.token)
    except CatalogError as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.get("/{live_id}", response_model=AdminLiveDetail)
async def get_live(
    live_id: str,
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    result = await state.gateway.query("lives", TableQuery().eq("id", live_id), ctx.token)
    rows = ensure_ok(result, "Failed to load live session")
    if not rows:
        raise HTTPException(status_code=404, detail="Live session not found")

    links = ensure_ok(
        await state.gateway.query("live_products", TableQuery(select="product_id").eq("live_id", live_id), ctx.token),
        "Failed to load live products",
    )
    return AdminLiveDetail(
        live=Live.model_validate(rows[0]),
        product_ids=[link["product_id"] for link in links or []],
    )


@router.post("", response_model=Live, status_code=201)
async def create_live(
    title: str = Form(...),
    scheduled_at: datetime = Form(...),
    facebook_link: Optional[str] = Form(None),
    status: LiveStatus = Form(LiveStatus.UPCOMING),
    cover_image: Optional[str] = Form(None),
    product_ids: Optional[list[str]] = Form(None),
    cover: Optional[UploadFile] = File(None),
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """Schedule a live session, optionally with a cover image"""
    form = live_form(title, scheduled_at, facebook_link, status, cover_image, product_ids)
    try:
        return await state.lives.save_live(form, ctx.token, cover=await read_upload(cover))
    except CatalogError as e:
        raise catalog_error(e)


@router.put("/{live_id}", response_model=Live)
async def update_live(
    live_id: str,
    title: str = Form(...),
    scheduled_at: datetime = Form(...),
    facebook_link: Optional[str] = Form(None),
    status: LiveStatus = Form(LiveStatus.UPCOMING),
    cover_image: Optional[str] = Form(None),
    product_ids: Optional[list[str]] = Form(None),
    cover: Optional[UploadFile] = File(None),
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    """Edit a live session and replace its product list"""
    form = live_form(title, scheduled_at, facebook_link, status, cover_image, product_ids)
    try:
        return await state.lives.save_live(form, ctx.token, live_id=live_id, cover=await read_upload(cover))
    except CatalogError as e:
        raise catalog_error(e)


@router.patch("/{live_id}/status", response_model=Live)
async def update_live_status(
    live_id: str,
    request: LiveStatusUpdate,
    ctx: AuthContext = Depends(require_admin),
    state: StorefrontState = Depends(get_state),
):
    try:
        return await state.lives.set_status(live_id, request.status, ctx.token)
    except CatalogError as e:
        raise catalog_error(e)
