"""Catalog routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends

from ..core.state import StorefrontState
from ..gateway import GatewayClient, Query as TableQuery
from ..models.product import Product, ProductListResponse
from ..security import get_state, optional_token
from ..services.listing import matches_search
from .errors import ensure_ok

router = APIRouter(prefix="/api/products", tags=["Products"])


async def load_active_products(gateway: GatewayClient, token: Optional[str]) -> list[Product]:
    result = await gateway.query("products", TableQuery().eq("is_active", True), token)
    rows = ensure_ok(result, "Failed to load products")
    return [Product.model_validate(row) for row in rows or []]


@router.get("", response_model=ProductListResponse)
async def list_products(
    category: Optional[str] = Query(None, description="Category, or 'all'"),
    q: Optional[str] = Query(None, description="Search name, description and category"),
    state: StorefrontState = Depends(get_state),
    token: Optional[str] = Depends(optional_token),
):
    """List active products with category and search filters"""
    products = await load_active_products(state.gateway, token)

    shown = [
        p for p in products
        if (not category or category == "all" or p.category == category)
        and matches_search(q, p.name, p.description, p.category)
    ]

    return ProductListResponse(products=shown, total=len(products), shown=len(shown))


@router.get("/categories", response_model=list[str])
async def list_categories(
    state: StorefrontState = Depends(get_state),
    token: Optional[str] = Depends(optional_token),
):
    """Distinct categories of active products"""
    products = await load_active_products(state.gateway, token)
    return sorted({p.category for p in products if p.category})


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    state: StorefrontState = Depends(get_state),
    token: Optional[str] = Depends(optional_token),
):
    """Get a product by ID"""
    result = await state.gateway.query("products", TableQuery().eq("id", product_id), token)
    rows = ensure_ok(result, "Failed to load product")
    if not rows:
        raise HTTPException(status_code=404, detail="Product not found")

    product = Product.model_validate(rows[0])
    if not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
