# rutacafe/repositories/favorites_repo.py
import uuid
from datetime import datetime, timezone
from typing import List

from pymongo.errors import DuplicateKeyError

from rutacafe.core.db import get_db
from rutacafe.models.common import EntityStatus


async def is_favorite(user_id: str, place_id: str) -> bool:
    return await get_db().favorites.find_one({"user_id": user_id, "place_id": place_id}) is not None


async def create(user_id: str, place_id: str) -> dict | None:
    """None si el favorito ya existía (índice único user_id + place_id)."""
    doc = {
        "id": uuid.uuid4().hex,
        "user_id": user_id,
        "place_id": place_id,
        "created_at": datetime.now(timezone.utc),
    }
    try:
        await get_db().favorites.insert_one(doc)
    except DuplicateKeyError:
        return None
    doc.pop("_id", None)
    return doc


async def delete(user_id: str, place_id: str) -> dict | None:
    return await get_db().favorites.find_one_and_delete(
        {"user_id": user_id, "place_id": place_id}, projection={"_id": 0}
    )


async def list_by_user(user_id: str) -> List[dict]:
    # Solo lugares aprobados: un favorito no expone lugares en revisión
    pipeline = [
        {"$match": {"user_id": user_id}},
        {"$sort": {"created_at": -1}},
        {"$lookup": {"from": "places", "localField": "place_id", "foreignField": "id", "as": "place"}},
        {"$unwind": "$place"},
        {"$match": {"place.status": EntityStatus.APPROVED.value}},
        {"$lookup": {"from": "routes", "localField": "place.route_id", "foreignField": "id", "as": "route"}},
        {"$project": {
            "_id": 0,
            "id": 1,
            "place_id": 1,
            "created_at": 1,
            "place_name": "$place.name",
            "place_description": "$place.description",
            "latitude": "$place.latitude",
            "longitude": "$place.longitude",
            "image_url": "$place.image_url",
            "route_id": "$place.route_id",
            "route_name": {"$first": "$route.name"},
            "status": "$place.status",
            "created_by": "$place.created_by",
        }},
    ]
    return await get_db().favorites.aggregate(pipeline).to_list(None)


async def count_by_place(place_id: str) -> int:
    return await get_db().favorites.count_documents({"place_id": place_id})


async def delete_by_place(place_id: str) -> int:
    res = await get_db().favorites.delete_many({"place_id": place_id})
    return res.deleted_count


async def delete_by_user(user_id: str) -> int:
    res = await get_db().favorites.delete_many({"user_id": user_id})
    return res.deleted_count
