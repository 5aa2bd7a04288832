# rutacafe/api/routes/users.py
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from rutacafe.api.deps import get_current_user, require_role
from rutacafe.core.config import settings
from rutacafe.core.errors import Conflict, NotFound, ValidationError
from rutacafe.models.common import ROLE_NAMES, Role
from rutacafe.models.city import CityCreate
from rutacafe.models.user import PasswordChange, RoleUpdate, UserProfileUpdate
from rutacafe.repositories import cities_repo, comments_repo, favorites_repo, likes_repo, users_repo
from rutacafe.services import auth_service, city_service
from rutacafe.utils.pagination import meta, page_of

logger = logging.getLogger(__name__)

router = APIRouter()


async def _ensure_not_last_admin(user: dict):
    if Role.coerce(user.get("role")) == Role.ADMIN and await users_repo.count({"role": int(Role.ADMIN)}) <= 1:
        raise Conflict("No puedes dejar el sistema sin administradores")


@router.get("/profile")
async def get_profile(current=Depends(get_current_user)):
    return auth_service.safe_user(current)


@router.put("/profile")
async def update_profile(payload: UserProfileUpdate, current=Depends(get_current_user)):
    """
    Permite al usuario autenticado actualizar sus datos de perfil.
    El correo y el rol no se cambian por aquí.
    """
    data = payload.model_dump(exclude_unset=True)
    if "city_id" in data:
        await city_service.ensure_exists(data["city_id"])
    if data:
        data["updated_at"] = datetime.now(timezone.utc)
        await users_repo.update(current["id"], data)
    return await users_repo.find_by_id(current["id"])


@router.put("/profile/password")
async def change_password(payload: PasswordChange, current=Depends(get_current_user)):
    await auth_service.change_password(current["id"], payload.current_password, payload.new_password)
    return {"ok": True}


@router.delete("/profile")
async def delete_profile(current=Depends(get_current_user)):
    await _ensure_not_last_admin(current)
    await likes_repo.delete_by_user(current["id"])
    await favorites_repo.delete_by_user(current["id"])
    await comments_repo.delete_by_user(current["id"])
    await users_repo.delete(current["id"])
    logger.info("Usuario %s eliminó su cuenta", current["id"])
    return {"ok": True}


def _with_role_name(users: list) -> list:
    for u in users:
        u["role_name"] = ROLE_NAMES.get(Role.coerce(u.get("role")))
    return users


@router.get("")
async def list_users(
    current=Depends(require_role([Role.ADMIN])),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    role: Optional[int] = Query(None, ge=0, le=3),
    q: Optional[str] = None,
):
    filt = {}
    if role is not None:
        filt["role"] = role
    if q:
        rx = {"$regex": q, "$options": "i"}
        filt["$or"] = [{"name": rx}, {"last_name": rx}, {"email": rx}]
    total = await users_repo.count(filt)
    m = meta(total, page, page_size)
    items = _with_role_name(await users_repo.list_paginated(filt, m.skip, m.page_size))
    return page_of(items, m)


@router.get("/cities")
async def list_cities():
    """Catálogo de ciudades (registro y filtros del panel)."""
    return await cities_repo.list_all()


@router.post("/cities", status_code=201)
async def create_city(payload: CityCreate, current=Depends(require_role([Role.ADMIN]))):
    city = await cities_repo.create(payload.name.strip())
    if city is None:
        raise Conflict("La ciudad ya existe")
    logger.info("Ciudad %s creada por %s", city["id"], current["id"])
    return city_service.city_ref(city)


async def _users_in(city: dict) -> dict:
    items = _with_role_name(await users_repo.list_by_city(city["id"]))
    return {"items": items, "city": city_service.city_ref(city)}


@router.get("/city")
async def users_in_admin_city(current=Depends(require_role([Role.ADMIN]))):
    return await _users_in(await city_service.admin_city(current))


@router.get("/city/{city_id}")
async def users_in_city(city_id: str, current=Depends(require_role([Role.ADMIN]))):
    return await _users_in(await city_service.resolve(city_id))


@router.put("/{user_id}/role")
async def update_role(user_id: str, payload: RoleUpdate, current=Depends(require_role([Role.ADMIN]))):
    if user_id == current["id"]:
        raise HTTPException(400, "No puedes cambiar tu propio rol")
    if payload.role == Role.VISITOR:
        raise ValidationError("El rol visitante no se asigna a cuentas")
    user = await users_repo.find_by_id(user_id)
    if not user:
        raise NotFound("Usuario no encontrado")
    if payload.role != Role.ADMIN:
        await _ensure_not_last_admin(user)
    await users_repo.update(user_id, {"role": int(payload.role), "updated_at": datetime.now(timezone.utc)})
    logger.info("Rol de %s cambiado a %s por %s", user_id, int(payload.role), current["id"])
    return await users_repo.find_by_id(user_id)
