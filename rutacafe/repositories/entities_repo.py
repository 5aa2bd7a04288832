# rutacafe/repositories/entities_repo.py
# Almacén de entidades moderadas (rutas y lugares). Una colección por tipo.
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from rutacafe.core.db import get_db
from rutacafe.models.common import EntityKind, EntityStatus

COLLECTIONS = {
    EntityKind.ROUTE: "routes",
    EntityKind.PLACE: "places",
}

NO_MONGO_ID = {"_id": 0}


def _coll(kind: EntityKind):
    return get_db()[COLLECTIONS[EntityKind(kind)]]


async def find_by_id(kind: EntityKind, entity_id: str) -> dict | None:
    return await _coll(kind).find_one({"id": entity_id}, NO_MONGO_ID)


async def list_all(kind: EntityKind, filt: Optional[Dict[str, Any]] = None) -> List[dict]:
    cur = _coll(kind).find(filt or {}, NO_MONGO_ID).sort("created_at", -1)
    return await cur.to_list(length=None)


async def list_by_creator(kind: EntityKind, creator_id: str) -> List[dict]:
    return await list_all(kind, {"created_by": creator_id})


async def update(kind: EntityKind, entity_id: str, fields: Dict[str, Any],
                 push: Optional[Dict[str, Any]] = None) -> int:
    ops: Dict[str, Any] = {"$set": fields}
    if push:
        ops["$push"] = push
    res = await _coll(kind).update_one({"id": entity_id}, ops)
    return res.matched_count


async def create(kind: EntityKind, fields: Dict[str, Any]) -> str:
    now = datetime.now(timezone.utc)
    doc = dict(fields)
    doc.update({
        "id": uuid.uuid4().hex,
        "status": EntityStatus.PENDING.value,
        "rejection_comment": None,
        "created_at": now,
        "modified_at": None,
        "modified_by": None,
        "state_history": [{
            "from_status": None,
            "to_status": EntityStatus.PENDING.value,
            "at": now,
            "by_user_id": fields.get("created_by"),
            "comment": None,
        }],
    })
    await _coll(kind).insert_one(doc)
    return doc["id"]


async def delete(kind: EntityKind, entity_id: str) -> int:
    res = await _coll(kind).delete_one({"id": entity_id})
    return res.deleted_count


async def count(kind: EntityKind, filt: Dict[str, Any]) -> int:
    return await _coll(kind).count_documents(filt)


async def count_by_status(kind: EntityKind) -> Dict[str, int]:
    rows = await _coll(kind).aggregate([
        {"$group": {"_id": "$status", "total": {"$sum": 1}}},
    ]).to_list(None)
    out = {s.value: 0 for s in EntityStatus}
    for r in rows:
        if r["_id"] in out:
            out[r["_id"]] = int(r["total"])
    return out
