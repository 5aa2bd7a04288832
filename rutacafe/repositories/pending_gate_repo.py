# rutacafe/repositories/pending_gate_repo.py
# Un registro por (tipo, creador) con una entidad "pendiente". El índice único
# sobre (kind, created_by) hace atómica la compuerta de creación.
from datetime import datetime, timezone

from pymongo.errors import DuplicateKeyError

from rutacafe.core.db import get_db
from rutacafe.models.common import EntityKind


async def claim(kind: EntityKind, creator_id) -> bool:
    """Reserva el cupo pendiente del creador. False si ya está ocupado."""
    try:
        await get_db().pending_gate.insert_one({
            "kind": EntityKind(kind).value,
            "created_by": creator_id,
            "at": datetime.now(timezone.utc),
        })
    except DuplicateKeyError:
        return False
    return True


async def release(kind: EntityKind, creator_id) -> int:
    res = await get_db().pending_gate.delete_one({"kind": EntityKind(kind).value, "created_by": creator_id})
    return res.deleted_count
