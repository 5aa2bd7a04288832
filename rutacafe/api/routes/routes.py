# rutacafe/api/routes/routes.py
from fastapi import APIRouter, Depends

from rutacafe.api.deps import current_viewer, get_viewer, require_role, viewer_of
from rutacafe.core.errors import Conflict, Unauthorized
from rutacafe.models.common import EntityKind, Role, Viewer
from rutacafe.models.entity import RouteCreate, RouteUpdate, TransitionPayload
from rutacafe.repositories import entities_repo
from rutacafe.services import city_service
from rutacafe.services import moderation_service as mod

router = APIRouter()
KIND = EntityKind.ROUTE


def _out(doc: dict, viewer: Viewer) -> dict:
    return mod.present_entity(KIND, doc, viewer)


@router.get("")
async def list_routes(viewer: Viewer = Depends(get_viewer)):
    return [_out(d, viewer) for d in await mod.list_visible(KIND, viewer)]


@router.get("/pending")
async def pending_routes(viewer: Viewer = Depends(current_viewer)):
    return [_out(d, viewer) for d in await mod.list_pending(KIND, viewer)]


@router.get("/can-create")
async def can_create_route(viewer: Viewer = Depends(current_viewer)):
    existing = await entities_repo.list_by_creator(KIND, viewer.id)
    allowed = mod.can_create(existing, viewer.id)
    return {"can_create": allowed, "reason": None if allowed else mod.PENDING_BLOCK[KIND]}


async def _routes_in(city: dict, viewer: Viewer) -> dict:
    docs = await mod.list_visible(KIND, viewer, {"city_id": city["id"]})
    return {"items": [_out(d, viewer) for d in docs], "city": city_service.city_ref(city)}


@router.get("/city")
async def routes_in_admin_city(current=Depends(require_role([Role.ADMIN]))):
    """Rutas de la ciudad asignada al administrador."""
    city = await city_service.admin_city(current)
    return await _routes_in(city, viewer_of(current))


@router.get("/city/{city_id}")
async def routes_in_city(city_id: str, viewer: Viewer = Depends(get_viewer)):
    city = await city_service.resolve(city_id)
    return await _routes_in(city, viewer)


@router.get("/{route_id}")
async def get_route(route_id: str, viewer: Viewer = Depends(get_viewer)):
    return _out(await mod.get_visible(KIND, route_id, viewer), viewer)


@router.post("", status_code=201)
async def create_route(payload: RouteCreate, viewer: Viewer = Depends(current_viewer)):
    await city_service.ensure_exists(payload.city_id)
    doc = await mod.create_entity(KIND, payload.model_dump(), viewer)
    return _out(doc, viewer)


@router.put("/{route_id}")
async def update_route(route_id: str, payload: RouteUpdate, viewer: Viewer = Depends(current_viewer)):
    fields = payload.model_dump(exclude_unset=True)
    if "city_id" in fields:
        await city_service.ensure_exists(fields["city_id"])
    doc = await mod.edit_entity(KIND, route_id, fields, viewer)
    return _out(doc, viewer)


@router.patch("/{route_id}/status")
async def set_route_status(route_id: str, payload: TransitionPayload, viewer: Viewer = Depends(current_viewer)):
    doc = await mod.transition(KIND, route_id, payload.status, payload.rejection_comment, viewer)
    return _out(doc, viewer)


@router.delete("/{route_id}")
async def delete_route(route_id: str, viewer: Viewer = Depends(current_viewer)):
    doc = await mod.get_visible(KIND, route_id, viewer)
    if not mod.can_modify(doc, viewer):
        raise Unauthorized("No tienes permiso para eliminar este contenido")
    if await entities_repo.count(EntityKind.PLACE, {"route_id": route_id}) > 0:
        raise Conflict("La ruta tiene lugares asociados; elimínalos primero")
    await mod.delete_entity(KIND, route_id, viewer)
    return {"ok": True}
