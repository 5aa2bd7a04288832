# rutacafe/repositories/likes_repo.py
from datetime import datetime, timezone
from typing import List

from pymongo.errors import DuplicateKeyError

from rutacafe.core.db import get_db


async def toggle(user_id: str, place_id: str) -> bool:
    """Da o quita el like. Devuelve True si queda con like."""
    db = get_db()
    res = await db.likes.delete_one({"user_id": user_id, "place_id": place_id})
    if res.deleted_count:
        return False
    try:
        await db.likes.insert_one({
            "user_id": user_id,
            "place_id": place_id,
            "created_at": datetime.now(timezone.utc),
        })
    except DuplicateKeyError:
        # doble toque: otra petición ya dejó el like puesto
        pass
    return True


async def count_by_place(place_id: str) -> int:
    return await get_db().likes.count_documents({"place_id": place_id})


async def user_liked(user_id: str, place_id: str) -> bool:
    return await get_db().likes.find_one({"user_id": user_id, "place_id": place_id}) is not None


async def liked_places(user_id: str) -> List[dict]:
    pipeline = [
        {"$match": {"user_id": user_id}},
        {"$sort": {"created_at": -1}},
        {"$lookup": {"from": "places", "localField": "place_id", "foreignField": "id", "as": "place"}},
        {"$unwind": "$place"},
        {"$project": {
            "_id": 0,
            "place_id": 1,
            "created_at": 1,
            "place_name": "$place.name",
            "place_description": "$place.description",
            "status": "$place.status",
            "created_by": "$place.created_by",
        }},
    ]
    return await get_db().likes.aggregate(pipeline).to_list(None)


async def delete_by_place(place_id: str) -> int:
    res = await get_db().likes.delete_many({"place_id": place_id})
    return res.deleted_count


async def delete_by_user(user_id: str) -> int:
    res = await get_db().likes.delete_many({"user_id": user_id})
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
    return await get_db().likes.aggregate(pipeline).to_list(None)
