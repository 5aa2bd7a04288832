# rutacafe/services/city_service.py
from typing import Any, Dict, Optional

from rutacafe.core.errors import NotFound, ValidationError
from rutacafe.repositories import cities_repo


def city_ref(city: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": city["id"], "name": city["name"]}


async def resolve(city_id: str) -> Dict[str, Any]:
    city = await cities_repo.find_by_id(city_id)
    if not city:
        raise NotFound("Ciudad no encontrada")
    return city


async def ensure_exists(city_id: Optional[str]) -> None:
    # null desasigna la ciudad
    if city_id is not None:
        await resolve(city_id)


async def admin_city(admin: Dict[str, Any]) -> Dict[str, Any]:
    """Ciudad del administrador: filtro por defecto de los listados por ciudad."""
    if not admin.get("city_id"):
        raise ValidationError("El administrador no tiene ciudad asignada")
    return await resolve(admin["city_id"])
