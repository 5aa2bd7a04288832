# rutacafe/services/moderation_service.py
"""
Reglas de moderación de rutas y lugares.

- Autoridad de transición: solo un administrador aprueba o rechaza.
- Filtro de visibilidad por rol (visitante/usuario: aprobadas; técnico:
  propias + aprobadas; administrador: todo).
- Compuerta de creación: un creador no puede tener dos entidades
  "pendiente" del mismo tipo.
- Política de acciones sobre lugares rechazados.

Las funciones puras reciben las entidades ya leídas; las async usan el
repositorio de entidades.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from rutacafe.core.config import settings
from rutacafe.core.errors import Conflict, NotFound, Unauthorized, ValidationError
from rutacafe.models.common import (
    ALLOWED_TRANSITIONS,
    REVIEW_STATUSES,
    STATUS_SYNONYMS,
    EntityKind,
    EntityStatus,
    PlaceAction,
    Role,
    Viewer,
)
from rutacafe.models.entity import StateEvent
from rutacafe.repositories import entities_repo as repo
from rutacafe.repositories import pending_gate_repo as gate

logger = logging.getLogger(__name__)

NOT_FOUND = {
    EntityKind.ROUTE: "Ruta no encontrada",
    EntityKind.PLACE: "Lugar no encontrado",
}

PENDING_BLOCK = {
    EntityKind.ROUTE: "Ya tienes una ruta pendiente de revisión. Espera a que sea aprobada o rechazada para crear otra.",
    EntityKind.PLACE: "Ya tienes un lugar pendiente de revisión. Espera a que sea aprobado o rechazado para crear otro.",
}

CREATOR_ROLES = {Role.TECHNICIAN, Role.ADMIN}

# Campos que una edición nunca puede tocar
PROTECTED_FIELDS = {"id", "status", "created_by", "created_at", "rejection_comment", "state_history",
                    "modified_by", "modified_at"}

CONTACT_FIELDS = ("phone_number", "website")


def _status_values(status: EntityStatus) -> List[str]:
    """Valor canónico más sus sinónimos heredados, para filtros MongoDB."""
    return [status.value] + [k for k, v in STATUS_SYNONYMS.items() if v == status.value]


# ============================
#        Estados
# ============================
def normalize_status(value: Any) -> Optional[EntityStatus]:
    if isinstance(value, EntityStatus):
        return value
    if isinstance(value, str):
        value = STATUS_SYNONYMS.get(value, value)
        try:
            return EntityStatus(value)
        except ValueError:
            return None
    return None


def normalize_entity(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Corrige estados heredados en lectura; sin estado válido queda 'pendiente'."""
    out = dict(doc)
    status = normalize_status(out.get("status"))
    out["status"] = (status or EntityStatus.PENDING).value
    out.setdefault("rejection_comment", None)
    return out


def ensure_transition(old: Any, new: Any) -> EntityStatus:
    target = normalize_status(new)
    if target not in REVIEW_STATUSES:
        raise ValidationError(f"Estado inválido: {new}. Debe ser 'aprobada' o 'rechazada'")
    current = normalize_status(old) or EntityStatus.PENDING
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(f"Transición no permitida: {current.value} → {target.value}")
    return target


# ============================
#     Filtro de visibilidad
# ============================
def _is_creator(entity: Mapping[str, Any], viewer: Viewer) -> bool:
    return viewer.id is not None and entity.get("created_by") == viewer.id


def _is_approved(entity: Mapping[str, Any]) -> bool:
    return normalize_status(entity.get("status")) == EntityStatus.APPROVED


def can_view(entity: Mapping[str, Any], viewer: Viewer) -> bool:
    role = viewer.role_enum
    if role == Role.ADMIN:
        return True
    if _is_approved(entity):
        return True
    return role == Role.TECHNICIAN and _is_creator(entity, viewer)


def visible_entities(entities: Iterable[Mapping[str, Any]], viewer: Viewer) -> List[Mapping[str, Any]]:
    """Subconjunto visible para el viewer, en el mismo orden de entrada."""
    return [e for e in entities if can_view(e, viewer)]


def visibility_query(viewer: Viewer) -> Dict[str, Any]:
    """La misma política que can_view, como filtro MongoDB."""
    role = viewer.role_enum
    if role == Role.ADMIN:
        return {}
    approved = {"status": {"$in": _status_values(EntityStatus.APPROVED)}}
    if role == Role.TECHNICIAN and viewer.id is not None:
        return {"$or": [approved, {"created_by": viewer.id}]}
    return approved


def can_modify(entity: Mapping[str, Any], viewer: Viewer) -> bool:
    return viewer.role_enum == Role.ADMIN or _is_creator(entity, viewer)


# ============================
#     Compuerta de creación
# ============================
def can_create(existing_entities: Iterable[Mapping[str, Any]], creator_id: Any) -> bool:
    for e in existing_entities:
        if e.get("created_by") == creator_id and normalize_status(e.get("status")) == EntityStatus.PENDING:
            return False
    return True


async def ensure_can_create(kind: EntityKind, creator_id: Any) -> None:
    """
    Comprueba y reserva el cupo pendiente del creador. La lectura cubre datos
    heredados; la reserva en pending_gate cubre dos altas simultáneas.
    """
    existing = await repo.list_by_creator(kind, creator_id)
    if not can_create(existing, creator_id) or not await gate.claim(kind, creator_id):
        logger.info("Creación de %s bloqueada: %s tiene una pendiente", kind.value, creator_id)
        raise Conflict(PENDING_BLOCK[kind])


async def _release_gate(kind: EntityKind, doc: Mapping[str, Any]) -> None:
    if doc.get("created_by") is not None:
        await gate.release(kind, doc["created_by"])


# ============================
#   Acciones sobre lugares
# ============================
def place_action_allowed(place: Mapping[str, Any], viewer: Viewer, action: Any) -> bool:
    action = PlaceAction(action)
    role = viewer.role_enum
    if action in (PlaceAction.LIKE, PlaceAction.COMMENT):
        # permitido incluso en lugares rechazados
        return viewer.is_authenticated
    if action == PlaceAction.EDIT:
        return can_modify(place, viewer)
    if role == Role.ADMIN:
        return True
    return normalize_status(place.get("status")) != EntityStatus.REJECTED


def allowed_place_actions(place: Mapping[str, Any], viewer: Viewer) -> Dict[str, bool]:
    return {a.value: place_action_allowed(place, viewer, a) for a in PlaceAction}


def present_entity(kind: EntityKind, doc: Mapping[str, Any], viewer: Viewer) -> Dict[str, Any]:
    out = normalize_entity(dict(doc))
    if kind == EntityKind.PLACE:
        actions = allowed_place_actions(out, viewer)
        if not actions[PlaceAction.CONTACT.value]:
            for f in CONTACT_FIELDS:
                out.pop(f, None)
        out["actions"] = actions
    else:
        out["actions"] = {"edit": can_modify(out, viewer)}
    # el historial solo le interesa a quien modera o es dueño
    if not can_modify(out, viewer):
        out.pop("state_history", None)
    return out


# ============================
#   Operaciones sobre el store
# ============================
async def get_visible(kind: EntityKind, entity_id: str, viewer: Viewer) -> Dict[str, Any]:
    doc = await repo.find_by_id(kind, entity_id)
    if not doc or not can_view(doc, viewer):
        raise NotFound(NOT_FOUND[kind])
    return normalize_entity(doc)


async def list_visible(kind: EntityKind, viewer: Viewer,
                       extra: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    clauses = [c for c in (extra, visibility_query(viewer)) if c]
    filt: Dict[str, Any] = {"$and": clauses} if len(clauses) > 1 else (clauses[0] if clauses else {})
    docs = await repo.list_all(kind, filt)
    return [normalize_entity(d) for d in visible_entities(docs, viewer)]


async def list_pending(kind: EntityKind, viewer: Viewer) -> List[Dict[str, Any]]:
    if viewer.role_enum != Role.ADMIN:
        raise Unauthorized("Solo un administrador puede ver la cola de moderación")
    docs = await repo.list_all(kind, {"status": {"$in": _status_values(EntityStatus.PENDING)}})
    return [normalize_entity(d) for d in docs]


async def create_entity(kind: EntityKind, fields: Dict[str, Any], viewer: Viewer) -> Dict[str, Any]:
    if viewer.role_enum not in CREATOR_ROLES or viewer.id is None:
        raise Unauthorized("Solo técnicos o administradores pueden crear contenido")
    await ensure_can_create(kind, viewer.id)

    data = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
    data["created_by"] = viewer.id
    try:
        new_id = await repo.create(kind, data)
    except Exception:
        await gate.release(kind, viewer.id)
        raise
    logger.info("%s %s creada por %s (pendiente)", kind.value, new_id, viewer.id)
    return normalize_entity(await repo.find_by_id(kind, new_id))


async def edit_entity(kind: EntityKind, entity_id: str, fields: Dict[str, Any], viewer: Viewer) -> Dict[str, Any]:
    doc = await repo.find_by_id(kind, entity_id)
    if not doc or not can_view(doc, viewer):
        raise NotFound(NOT_FOUND[kind])
    if kind == EntityKind.PLACE:
        allowed = place_action_allowed(doc, viewer, PlaceAction.EDIT)
    else:
        allowed = can_modify(doc, viewer)
    if not allowed:
        raise Unauthorized("No tienes permiso para editar este contenido")

    now = datetime.now(timezone.utc)
    updates = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
    updates.update({"modified_by": viewer.id, "modified_at": now})
    push = None

    current = normalize_status(doc.get("status"))
    if settings.resubmit_rejected_on_edit and current == EntityStatus.REJECTED and _is_creator(doc, viewer):
        if not await gate.claim(kind, viewer.id):
            raise Conflict(PENDING_BLOCK[kind])
        # reenvío a revisión: vuelve a pendiente sin comentario viejo
        updates.update({"status": EntityStatus.PENDING.value, "rejection_comment": None})
        push = {"state_history": StateEvent(
            from_status=current, to_status=EntityStatus.PENDING, at=now, by_user_id=viewer.id,
        ).model_dump()}
        logger.info("%s %s reenviada a revisión por %s", kind.value, entity_id, viewer.id)

    matched = await repo.update(kind, entity_id, updates, push=push)
    if matched == 0:
        if push:
            await gate.release(kind, viewer.id)
        raise NotFound(NOT_FOUND[kind])
    return normalize_entity(await repo.find_by_id(kind, entity_id))


async def delete_entity(kind: EntityKind, entity_id: str, viewer: Viewer) -> Dict[str, Any]:
    doc = await repo.find_by_id(kind, entity_id)
    if not doc or not can_view(doc, viewer):
        raise NotFound(NOT_FOUND[kind])
    if not can_modify(doc, viewer):
        raise Unauthorized("No tienes permiso para eliminar este contenido")
    if await repo.delete(kind, entity_id) == 0:
        raise NotFound(NOT_FOUND[kind])
    if normalize_status(doc.get("status")) == EntityStatus.PENDING:
        await _release_gate(kind, doc)
    logger.info("%s %s eliminada por %s", kind.value, entity_id, viewer.id)
    return doc


async def transition(kind: EntityKind, entity_id: str, requested_status: Any,
                     comment: Optional[str], viewer: Viewer) -> Dict[str, Any]:
    if viewer.role_enum != Role.ADMIN:
        raise Unauthorized("Solo un administrador puede aprobar o rechazar")

    target = normalize_status(requested_status)
    if target not in REVIEW_STATUSES:
        raise ValidationError(f"Estado inválido: {requested_status}. Debe ser 'aprobada' o 'rechazada'")
    clean_comment = (comment or "").strip()
    if target == EntityStatus.REJECTED and not clean_comment:
        raise ValidationError("comentario de rechazo requerido")

    doc = await repo.find_by_id(kind, entity_id)
    if not doc:
        raise NotFound(NOT_FOUND[kind])
    current = normalize_status(doc.get("status")) or EntityStatus.PENDING
    ensure_transition(current, target)

    now = datetime.now(timezone.utc)
    fields: Dict[str, Any] = {
        "status": target.value,
        "modified_by": viewer.id,
        "modified_at": now,
        # al aprobar no queda un motivo de rechazo viejo
        "rejection_comment": clean_comment if target == EntityStatus.REJECTED else None,
    }
    event = StateEvent(
        from_status=current, to_status=target, at=now, by_user_id=viewer.id,
        comment=clean_comment or None,
    ).model_dump()

    # último en escribir gana: sin control de versión
    matched = await repo.update(kind, entity_id, fields, push={"state_history": event})
    if matched == 0:
        raise NotFound(NOT_FOUND[kind])
    if current == EntityStatus.PENDING:
        # sale de revisión: el creador recupera su cupo
        await _release_gate(kind, doc)
    logger.info("%s %s: %s → %s por %s", kind.value, entity_id, current.value, target.value, viewer.id)
    return normalize_entity(await repo.find_by_id(kind, entity_id))
