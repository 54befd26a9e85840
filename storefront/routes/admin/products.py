"""Superuser catalog management"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends, File, Form, UploadFile
from pydantic import ValidationError

from ...core.state import StorefrontState
from ...gateway import Query as TableQuery
from ...models.admin import AdminProductList
from ...models.product import Product, ProductForm
from ...security import AuthContext, get_state, require_superuser
from ...services.errors import CatalogError
from ...services.formatting import format_status
from ...services.listing import filter_by_status, filter_label, matches_search, sort_newest_first
from ..errors import ensure_ok
from ..uploads import read_uploads

router = APIRouter(prefix="/api/admin/products", tags=["Admin"])

PRODUCT_STATES = ["active", "inactive"]


def product_state(product: Product) -> str:
    return "active" if product.is_active else "inactive"


def product_form(
    name: str,
    price: float,
    description: Optional[str],
    category: Optional[str],
    stock: int,
    existing_images: Optional[list[str]],
) -> ProductForm:
    try:
        return ProductForm(
            name=name.strip(),
            description=description,
            price=price,
            category=category,
            stock=stock,
            existing_images=[url for url in existing_images or [] if url],
        )
    except ValidationError:
        raise HTTPException(status_code=400, detail="Please check the product details")


@router.get("", response_model=AdminProductList)
async def list_products(
    status: Optional[list[str]] = Query(None, description="active and/or inactive; omit for all"),
    q: Optional[str] = Query(None, description="Search name, category and description"),
    ctx: AuthContext = Depends(require_superuser),
    state: StorefrontState = Depends(get_state),
):
    """Every product, including inactive ones"""
    result = await state.gateway.query("products", TableQuery(), ctx.token)
    rows = ensure_ok(result, "Failed to load products")
    products = sort_newest_first(Product.model_validate(row) for row in rows or [])

    selected = status if status is not None else PRODUCT_STATES
    shown = [
        p for p in filter_by_status(products, selected, PRODUCT_STATES, product_state)
        if matches_search(q, p.name, p.category, p.description)
    ]

    return AdminProductList(
        products=shown,
        total=len(products),
        shown=len(shown),
        filter_label=filter_label(selected, PRODUCT_STATES, format_status),
    )


@router.post("", response_model=Product, status_code=201)
async def create_product(
    name: str = Form(...),
    price: float = Form(...),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    stock: int = Form(0),
    existing_images: Optional[list[str]] = Form(None),
    images: Optional[list[UploadFile]] = File(None),
    ctx: AuthContext = Depends(require_superuser),
    state: StorefrontState = Depends(get_state),
):
    """Create a product, uploading any attached images"""
    form = product_form(name, price, description, category, stock, existing_images)
    try:
        return await state.catalog.save_product(form, await read_uploads(images), ctx.token)
    except CatalogError as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    name: str = Form(...),
    price: float = Form(...),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    stock: int = Form(0),
    existing_images: Optional[list[str]] = Form(None),
    images: Optional[list[UploadFile]] = File(None),
    ctx: AuthContext = Depends(require_superuser),
    state: StorefrontState = Depends(get_state),
):
    """Edit a product; existing_images lists the image URLs to keep"""
    form = product_form(name, price, description, category, stock, existing_images)
    try:
        return await state.catalog.save_product(form, await read_uploads(images), ctx.token, product_id=product_id)
    except CatalogError as e:
        status_code = 404 if e.code == "not_found" else 502
        raise HTTPException(status_code=status_code, detail=e.message)


@router.post("/{product_id}/toggle", response_model=Product)
async def toggle_product(
    product_id: str,
    ctx: AuthContext = Depends(require_superuser),
    state: StorefrontState = Depends(get_state),
):
    """Show or hide a product in the storefront"""
    result = await state.gateway.query("products", TableQuery().eq("id", product_id), ctx.token)
    rows = ensure_ok(result, "Failed to load product")
    if not rows:
        raise HTTPException(status_code=404, detail="Product not found")
    product = Product.model_validate(rows[0])

    try:
        return await state.catalog.set_active(product.id, not product.is_active, ctx.token)
    except CatalogError as e:
        raise HTTPException(status_code=502, detail=e.message)
