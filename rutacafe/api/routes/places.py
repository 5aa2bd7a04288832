# rutacafe/api/routes/places.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from rutacafe.api.deps import current_viewer, get_viewer
from rutacafe.models.common import EntityKind, Viewer
from rutacafe.models.entity import PlaceCreate, PlaceUpdate, TransitionPayload
from rutacafe.repositories import comments_repo, entities_repo, favorites_repo, likes_repo
from rutacafe.services import moderation_service as mod

logger = logging.getLogger(__name__)

router = APIRouter()
KIND = EntityKind.PLACE


def _out(doc: dict, viewer: Viewer) -> dict:
    return mod.present_entity(KIND, doc, viewer)


@router.get("")
async def list_places(route_id: Optional[str] = Query(None), viewer: Viewer = Depends(get_viewer)):
    extra = {"route_id": route_id} if route_id else None
    return [_out(d, viewer) for d in await mod.list_visible(KIND, viewer, extra)]


@router.get("/pending")
async def pending_places(viewer: Viewer = Depends(current_viewer)):
    return [_out(d, viewer) for d in await mod.list_pending(KIND, viewer)]


@router.get("/can-create")
async def can_create_place(viewer: Viewer = Depends(current_viewer)):
    existing = await entities_repo.list_by_creator(KIND, viewer.id)
    allowed = mod.can_create(existing, viewer.id)
    return {"can_create": allowed, "reason": None if allowed else mod.PENDING_BLOCK[KIND]}


@router.get("/route/{route_id}")
async def places_by_route(route_id: str, viewer: Viewer = Depends(get_viewer)):
    # la ruta misma debe ser visible
    await mod.get_visible(EntityKind.ROUTE, route_id, viewer)
    return [_out(d, viewer) for d in await mod.list_visible(KIND, viewer, {"route_id": route_id})]


@router.get("/{place_id}")
async def get_place(place_id: str, viewer: Viewer = Depends(get_viewer)):
    out = _out(await mod.get_visible(KIND, place_id, viewer), viewer)
    out["likes"] = await likes_repo.count_by_place(place_id)
    out["comments_count"] = await comments_repo.count_by_place(place_id)
    out["favorites_count"] = await favorites_repo.count_by_place(place_id)
    if viewer.is_authenticated:
        out["liked"] = await likes_repo.user_liked(viewer.id, place_id)
        out["is_favorite"] = await favorites_repo.is_favorite(viewer.id, place_id)
    return out


@router.post("", status_code=201)
async def create_place(payload: PlaceCreate, viewer: Viewer = Depends(current_viewer)):
    # un lugar solo se cuelga de una ruta que el creador puede ver
    await mod.get_visible(EntityKind.ROUTE, payload.route_id, viewer)
    doc = await mod.create_entity(KIND, payload.model_dump(), viewer)
    return _out(doc, viewer)


@router.put("/{place_id}")
async def update_place(place_id: str, payload: PlaceUpdate, viewer: Viewer = Depends(current_viewer)):
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("route_id"):
        await mod.get_visible(EntityKind.ROUTE, fields["route_id"], viewer)
    doc = await mod.edit_entity(KIND, place_id, fields, viewer)
    return _out(doc, viewer)


@router.patch("/{place_id}/status")
async def set_place_status(place_id: str, payload: TransitionPayload, viewer: Viewer = Depends(current_viewer)):
    doc = await mod.transition(KIND, place_id, payload.status, payload.rejection_comment, viewer)
    return _out(doc, viewer)


@router.delete("/{place_id}")
async def delete_place(place_id: str, viewer: Viewer = Depends(current_viewer)):
    await mod.delete_entity(KIND, place_id, viewer)
    removed = {
        "comments": await comments_repo.delete_by_place(place_id),
        "likes": await likes_repo.delete_by_place(place_id),
        "favorites": await favorites_repo.delete_by_place(place_id),
    }
    logger.info("Lugar %s: dependencias eliminadas %s", place_id, removed)
    return {"ok": True, "removed": removed}
