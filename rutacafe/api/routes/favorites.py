# rutacafe/api/routes/favorites.py
from fastapi import APIRouter, Depends

from rutacafe.api.deps import current_viewer
from rutacafe.core.errors import Conflict, NotFound
from rutacafe.models.common import EntityKind, Viewer
from rutacafe.models.engagement import FavoritePayload
from rutacafe.repositories import favorites_repo
from rutacafe.services import moderation_service as mod

router = APIRouter()


@router.get("")
async def my_favorites(viewer: Viewer = Depends(current_viewer)):
    rows = await favorites_repo.list_by_user(viewer.id)
    # un favorito nunca expone lugares en revisión, ni siquiera al propio creador
    return mod.visible_entities(rows, Viewer.anonymous())


@router.get("/check/{place_id}")
async def check_favorite(place_id: str, viewer: Viewer = Depends(current_viewer)):
    return {"is_favorite": await favorites_repo.is_favorite(viewer.id, place_id)}


@router.post("", status_code=201)
async def add_favorite(payload: FavoritePayload, viewer: Viewer = Depends(current_viewer)):
    await mod.get_visible(EntityKind.PLACE, payload.place_id, viewer)
    created = None
    if not await favorites_repo.is_favorite(viewer.id, payload.place_id):
        created = await favorites_repo.create(viewer.id, payload.place_id)
    if created is None:
        raise Conflict("El lugar ya está en favoritos")
    return created


@router.delete("/{place_id}")
async def remove_favorite(place_id: str, viewer: Viewer = Depends(current_viewer)):
    removed = await favorites_repo.delete(viewer.id, place_id)
    if not removed:
        raise NotFound("El lugar no está en favoritos")
    return {"ok": True}
