"""Account details routes"""

from fastapi import APIRouter, HTTPException, Depends

from ..core.state import StorefrontState
from ..gateway import GatewayRequestError
from ..models.user import AccountUpdate, User
from ..security import AuthContext, get_state, require_user

router = APIRouter(prefix="/api/account", tags=["Account"])


@router.get("", response_model=User)
async def get_account(ctx: AuthContext = Depends(require_user)):
    return ctx.user


@router.put("", response_model=User)
async def update_account(
    request: AccountUpdate,
    ctx: AuthContext = Depends(require_user),
    state: StorefrontState = Depends(get_state),
):
    """Update profile fields; blank optional fields are cleared"""
    values = {
        "full_name": request.full_name,
        "phone": request.phone or None,
        "facebook_link": request.facebook_link or None,
        "facebook_name": request.facebook_name or None,
        "birthday": request.birthday or None,
        "address": request.address or None,
    }
    result = await state.gateway.update("users", values, {"id": ctx.user.id}, ctx.token)
    try:
        result.unwrap("Failed to update profile")
    except GatewayRequestError as e:
        raise HTTPException(status_code=400, detail=e.message)

    user = await state.auth.refresh_profile(ctx.session)
    return user or ctx.user
