"""Sign-up, sign-in and current identity routes"""

from fastapi import APIRouter, HTTPException, Depends

from ..core.session import BrowsingSession
from ..core.state import StorefrontState
from ..models.user import LoginRequest, MeResponse, RegisterRequest
from ..security import get_browsing_session, get_state
from ..services.errors import AuthError

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def me_response(session: BrowsingSession) -> MeResponse:
    auth = session.auth
    if not auth:
        return MeResponse(authenticated=False)
    return MeResponse(
        authenticated=True,
        user=auth.profile,
        is_customer=auth.is_customer,
        is_admin=auth.is_admin,
        is_superuser=auth.is_superuser,
    )


@router.post("/register")
async def register(
    request: RegisterRequest,
    state: StorefrontState = Depends(get_state),
):
    """Create an account; the backend may require email confirmation"""
    try:
        await state.auth.sign_up(request.email, request.password, request.full_name)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return {"message": "Account created. Please sign in."}


@router.post("/login", response_model=MeResponse)
async def login(
    request: LoginRequest,
    session: BrowsingSession = Depends(get_browsing_session),
    state: StorefrontState = Depends(get_state),
):
    """Sign the browsing session in"""
    try:
        await state.auth.sign_in(session, request.email, request.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=e.message)
    return me_response(session)


@router.post("/logout", response_model=MeResponse)
async def logout(
    session: BrowsingSession = Depends(get_browsing_session),
    state: StorefrontState = Depends(get_state),
):
    """Sign out; the cart belongs to the browsing session and is kept"""
    await state.auth.sign_out(session)
    return me_response(session)


@router.get("/me", response_model=MeResponse)
async def me(
    session: BrowsingSession = Depends(get_browsing_session),
    state: StorefrontState = Depends(get_state),
):
    """Current identity and role flags"""
    await state.auth.ensure_fresh(session)
    return me_response(session)
