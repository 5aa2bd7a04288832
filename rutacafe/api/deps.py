# rutacafe/api/deps.py
from typing import Iterable, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rutacafe.core.errors import Unauthorized
from rutacafe.core.security import decode_token
from rutacafe.models.common import Role, Viewer
from rutacafe.repositories import users_repo

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    try:
        payload = decode_token(credentials.credentials)
        user_id = payload.get("sub")
        if not user_id:
            raise ValueError()
    except (jwt.PyJWTError, ValueError):
        raise HTTPException(status_code=401, detail="Credenciales inválidas")

    user = await users_repo.find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Usuario no encontrado")
    return user  # dict


async def get_viewer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> Viewer:
    """Autenticación opcional: sin token o con token inválido se navega como visitante."""
    if credentials is None:
        return Viewer.anonymous()
    try:
        payload = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        return Viewer.anonymous()
    if not payload.get("sub"):
        return Viewer.anonymous()
    return Viewer(role=Role.coerce(payload.get("role")), id=payload["sub"])


def viewer_of(user: dict) -> Viewer:
    return Viewer(role=Role.coerce(user.get("role")), id=user["id"])


async def current_viewer(user: dict = Depends(get_current_user)) -> Viewer:
    # el rol sale de la BD, no del token: un cambio de rol aplica de inmediato
    return viewer_of(user)


def require_role(roles: Iterable[Role]):
    allowed = {Role(r) for r in roles}

    async def checker(user: dict = Depends(get_current_user)) -> dict:
        if Role.coerce(user.get("role")) not in allowed:
            raise Unauthorized()
        return user
    return checker
