# rutacafe/repositories/cities_repo.py
import uuid
from datetime import datetime, timezone
from typing import List

from pymongo.errors import DuplicateKeyError

from rutacafe.core.db import get_db

NO_MONGO_ID = {"_id": 0}


async def list_all() -> List[dict]:
    cur = get_db().cities.find({}, {"_id": 0, "id": 1, "name": 1}).sort("name", 1)
    return await cur.to_list(length=None)


async def find_by_id(city_id: str) -> dict | None:
    return await get_db().cities.find_one({"id": city_id}, NO_MONGO_ID)


async def create(name: str) -> dict | None:
    """None si ya existe una ciudad con ese nombre (índice único)."""
    doc = {"id": uuid.uuid4().hex, "name": name, "created_at": datetime.now(timezone.utc)}
    try:
        await get_db().cities.insert_one(dict(doc))
    except DuplicateKeyError:
        return None
    return doc
