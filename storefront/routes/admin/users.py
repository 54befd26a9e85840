"""Superuser user and role management"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends

from ...core.state import StorefrontState
from ...gateway import Query as TableQuery
from ...models.admin import AdminUserList
from ...models.user import RoleUpdate, User, UserRole
from ...security import AuthContext, get_state, require_superuser
from ...services.formatting import format_role
from ...services.listing import filter_by_status, filter_label, matches_search, sort_newest_first
from ..errors import ensure_ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/users", tags=["Admin"])

ALL_ROLES = [r.value for r in UserRole]


@router.get("", response_model=AdminUserList)
async def list_users(
    role: Optional[list[str]] = Query(None, description="Roles to show; omit for all"),
    q: Optional[str] = Query(None, description="Search name, email and phone"),
    ctx: AuthContext = Depends(require_superuser),
    state: StorefrontState = Depends(get_state),
):
    result = await state.gateway.query("users", TableQuery(), ctx.token)
    rows = ensure_ok(result, "Failed to load users")
    users = sort_newest_first(User.model_validate(row) for row in rows or [])

    selected = role if role is not None else ALL_ROLES
    shown = [
        u for u in filter_by_status(users, selected, ALL_ROLES, lambda u: u.role)
        if matches_search(q, u.full_name, u.email, u.phone)
    ]

    return AdminUserList(
        users=shown,
        total=len(users),
        shown=len(shown),
        filter_label=filter_label(selected, ALL_ROLES, format_role, all_label="All Roles"),
    )


@router.patch("/{user_id}/role", response_model=User)
async def update_user_role(
    user_id: str,
    request: RoleUpdate,
    ctx: AuthContext = Depends(require_superuser),
    state: StorefrontState = Depends(get_state),
):
    """Change a user's role; superusers cannot demote themselves"""
    if user_id == ctx.user.id:
        raise HTTPException(status_code=400, detail="You cannot change your own role")

    result = await state.gateway.update("users", {"role": request.role.value}, {"id": user_id}, ctx.token)
    row = ensure_ok(result, "Failed to update role")
    if not row:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"User {user_id} role set to {request.role.value} by {ctx.user.id}")
    return User.model_validate(row)
