# rutacafe/repositories/comments_repo.py
import uuid
from datetime import datetime, timezone
from typing import List

from rutacafe.core.db import get_db


async def create(place_id: str, user: dict, text: str) -> dict:
    now = datetime.now(timezone.utc)
    doc = {
        "id": uuid.uuid4().hex,
        "place_id": place_id,
        "user_id": user["id"],
        "user_name": f'{user.get("name", "")} {user.get("last_name", "")}'.strip(),
        "comment": text,
        "created_at": now,
        "modified_at": now,
    }
    await get_db().comments.insert_one(doc)
    doc.pop("_id", None)
    return doc


async def list_by_place(place_id: str, limit: int = 500) -> List[dict]:
    cur = get_db().comments.find({"place_id": place_id}, {"_id": 0}).sort("created_at", -1).limit(limit)
    return await cur.to_list(length=limit)


async def find_by_id(comment_id: str) -> dict | None:
    return await get_db().comments.find_one({"id": comment_id}, {"_id": 0})


async def update_text(comment_id: str, text: str) -> dict | None:
    await get_db().comments.update_one(
        {"id": comment_id},
        {"$set": {"comment": text, "modified_at": datetime.now(timezone.utc)}},
    )
    return await find_by_id(comment_id)


async def delete(comment_id: str) -> int:
    res = await get_db().comments.delete_one({"id": comment_id})
    return res.deleted_count


async def delete_by_place(place_id: str) -> int:
    res = await get_db().comments.delete_many({"place_id": place_id})
    return res.deleted_count


async def count_by_place(place_id: str) -> int:
    return await get_db().comments.count_documents({"place_id": place_id})


async def delete_by_user(user_id: str) -> int:
    res = await get_db().comments.delete_many({"user_id": user_id})
    return res.deleted_count


async def top_places(n: int = 5) -> List[dict]:
    pipeline = [
        {"$group": {"_id": "$place_id", "total": {"$sum": 1}}},
        {"$sort": {"total": -1}},
        {"$limit": n},
        {"$lookup": {"from": "places", "localField": "_id", "foreignField": "id", "as": "place"}},
        {"$unwind": "$place"},
        {"$project": {"_id": 0, "place_id": "$_id", "name": "$place.name", "total": 1}},
    ]
    return await get_db().comments.aggregate(pipeline).to_list(None)
