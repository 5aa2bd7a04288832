# rutacafe/api/routes/comments.py
from fastapi import APIRouter, Depends

from rutacafe.api.deps import get_current_user, get_viewer, viewer_of
from rutacafe.core.errors import NotFound, Unauthorized, ValidationError
from rutacafe.models.common import EntityKind, PlaceAction, Role, Viewer
from rutacafe.models.engagement import CommentCreate, CommentUpdate
from rutacafe.repositories import comments_repo
from rutacafe.services import moderation_service as mod

router = APIRouter()


def _clean(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError("El comentario no puede estar vacío")
    return text


@router.get("/place/{place_id}")
async def list_comments(place_id: str, viewer: Viewer = Depends(get_viewer)):
    await mod.get_visible(EntityKind.PLACE, place_id, viewer)
    return await comments_repo.list_by_place(place_id)


@router.post("", status_code=201)
async def create_comment(payload: CommentCreate, user=Depends(get_current_user)):
    viewer = viewer_of(user)
    place = await mod.get_visible(EntityKind.PLACE, payload.place_id, viewer)
    if not mod.place_action_allowed(place, viewer, PlaceAction.COMMENT):
        raise Unauthorized("No puedes comentar este lugar")
    return await comments_repo.create(payload.place_id, user, _clean(payload.comment))


@router.put("/{comment_id}")
async def update_comment(comment_id: str, payload: CommentUpdate, user=Depends(get_current_user)):
    comment = await comments_repo.find_by_id(comment_id)
    if not comment:
        raise NotFound("Comentario no encontrado")
    if comment["user_id"] != user["id"]:
        raise Unauthorized("Solo el autor puede editar el comentario")
    return await comments_repo.update_text(comment_id, _clean(payload.comment))


@router.delete("/{comment_id}")
async def delete_comment(comment_id: str, user=Depends(get_current_user)):
    comment = await comments_repo.find_by_id(comment_id)
    if not comment:
        raise NotFound("Comentario no encontrado")
    if comment["user_id"] != user["id"] and Role.coerce(user.get("role")) != Role.ADMIN:
        raise Unauthorized("No tienes permiso para eliminar este comentario")
    await comments_repo.delete(comment_id)
    return {"ok": True}
