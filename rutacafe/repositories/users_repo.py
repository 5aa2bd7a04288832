# rutacafe/repositories/users_repo.py
from typing import Any, Dict, List

from rutacafe.core.db import get_db

PUBLIC = {"_id": 0, "password_hash": 0}


async def find_by_id(user_id: str, with_password: bool = False) -> dict | None:
    projection = {"_id": 0} if with_password else PUBLIC
    return await get_db().users.find_one({"id": user_id}, projection)


async def find_by_email(email: str) -> dict | None:
    return await get_db().users.find_one({"email": email.strip().lower()}, {"_id": 0})


async def insert(doc: dict):
    await get_db().users.insert_one(dict(doc))


async def update(user_id: str, fields: Dict[str, Any]) -> int:
    res = await get_db().users.update_one({"id": user_id}, {"$set": fields})
    return res.matched_count


async def delete(user_id: str) -> int:
    res = await get_db().users.delete_one({"id": user_id})
    return res.deleted_count


async def list_paginated(filt: Dict[str, Any], skip: int, limit: int) -> List[dict]:
    cur = get_db().users.find(filt, PUBLIC).sort("created_at", -1).skip(skip).limit(limit)
    return await cur.to_list(length=limit)


async def count(filt: Dict[str, Any]) -> int:
    return await get_db().users.count_documents(filt)


async def count_by_role() -> Dict[int, int]:
    rows = await get_db().users.aggregate([
        {"$group": {"_id": "$role", "count": {"$sum": 1}}},
    ]).to_list(None)
    return {int(r["_id"]): int(r["count"]) for r in rows if r["_id"] is not None}


async def list_by_city(city_id: str) -> List[dict]:
    cur = get_db().users.find({"city_id": city_id}, PUBLIC).sort([("name", 1), ("last_name", 1)])
    return await cur.to_list(length=None)
