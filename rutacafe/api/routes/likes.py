# rutacafe/api/routes/likes.py
from fastapi import APIRouter, Depends

from rutacafe.api.deps import current_viewer, get_viewer
from rutacafe.core.errors import Unauthorized
from rutacafe.models.common import EntityKind, PlaceAction, Viewer
from rutacafe.models.engagement import FavoritePayload
from rutacafe.repositories import likes_repo
from rutacafe.services import moderation_service as mod

router = APIRouter()


@router.post("/toggle")
async def toggle_like(payload: FavoritePayload, viewer: Viewer = Depends(current_viewer)):
    place = await mod.get_visible(EntityKind.PLACE, payload.place_id, viewer)
    if not mod.place_action_allowed(place, viewer, PlaceAction.LIKE):
        raise Unauthorized("No puedes dar like a este lugar")
    liked = await likes_repo.toggle(viewer.id, payload.place_id)
    return {"liked": liked, "total": await likes_repo.count_by_place(payload.place_id)}


@router.get("/count/{place_id}")
async def count_likes(place_id: str, viewer: Viewer = Depends(get_viewer)):
    await mod.get_visible(EntityKind.PLACE, place_id, viewer)
    return {"place_id": place_id, "total": await likes_repo.count_by_place(place_id)}


@router.get("/check/{place_id}")
async def check_like(place_id: str, viewer: Viewer = Depends(current_viewer)):
    return {"liked": await likes_repo.user_liked(viewer.id, place_id)}


@router.get("/user")
async def my_likes(viewer: Viewer = Depends(current_viewer)):
    rows = await likes_repo.liked_places(viewer.id)
    # un lugar que dejó de ser visible no se lista
    return [r for r in rows if mod.can_view(r, viewer)]
