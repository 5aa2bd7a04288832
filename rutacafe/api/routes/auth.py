# rutacafe/api/routes/auth.py
from fastapi import APIRouter, Depends, Request

from rutacafe.api.deps import get_current_user
from rutacafe.core.rate_limit import LOGIN_LIMIT, limiter
from rutacafe.models.user import UserLogin, UserRegister
from rutacafe.services import auth_service

router = APIRouter(prefix="/auth")


@router.post("/register", status_code=201)
async def register(payload: UserRegister):
    user = await auth_service.register(payload)
    return auth_service.token_response(user)


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(request: Request, payload: UserLogin):
    """Login de la app móvil."""
    user = await auth_service.authenticate(payload.email, payload.password, admin=False)
    return auth_service.token_response(user)


@router.post("/admin-login")
@limiter.limit(LOGIN_LIMIT)
async def admin_login(request: Request, payload: UserLogin):
    """Login del panel web; solo administradores."""
    user = await auth_service.authenticate(payload.email, payload.password, admin=True)
    return auth_service.token_response(user)


@router.get("/me")
async def me(current_user=Depends(get_current_user)):
    return auth_service.safe_user(current_user)
