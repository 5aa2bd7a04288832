# rutacafe/repositories/ads_repo.py
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from rutacafe.core.db import get_db


async def create(fields: Dict[str, Any], created_by: str | None) -> dict:
    doc = dict(fields)
    doc.update({
        "id": uuid.uuid4().hex,
        "created_by": created_by,
        "created_at": datetime.now(timezone.utc),
        "modified_at": None,
        "modified_by": None,
    })
    await get_db().advertising.insert_one(doc)
    doc.pop("_id", None)
    return doc


async def list_all() -> List[dict]:
    cur = get_db().advertising.find({}, {"_id": 0}).sort("created_at", -1)
    return await cur.to_list(length=None)


async def list_public(now: datetime) -> List[dict]:
    filt = {
        "status": "activo",
        "$and": [
            {"$or": [{"start_date": None}, {"start_date": {"$lte": now}}]},
            {"$or": [{"end_date": None}, {"end_date": {"$gte": now}}]},
        ],
    }
    cur = get_db().advertising.find(filt, {"_id": 0}).sort("created_at", -1)
    return await cur.to_list(length=None)


async def find_by_id(ad_id: str) -> dict | None:
    return await get_db().advertising.find_one({"id": ad_id}, {"_id": 0})


async def update(ad_id: str, fields: Dict[str, Any], modified_by: str | None) -> int:
    fields = dict(fields, modified_at=datetime.now(timezone.utc), modified_by=modified_by)
    res = await get_db().advertising.update_one({"id": ad_id}, {"$set": fields})
    return res.matched_count


async def delete(ad_id: str) -> int:
    res = await get_db().advertising.delete_one({"id": ad_id})
    return res.deleted_count
