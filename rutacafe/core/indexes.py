# rutacafe/core/indexes.py
import logging
import uuid
from datetime import datetime, timezone

from rutacafe.core.config import settings
from rutacafe.core.db import get_db
from rutacafe.core.security import hash_password
from rutacafe.models.common import STATUS_SYNONYMS, EntityKind, EntityStatus, Role

logger = logging.getLogger(__name__)

ENTITY_COLLECTIONS = ("routes", "places")
ENTITY_KINDS = {"routes": EntityKind.ROUTE, "places": EntityKind.PLACE}


async def ensure_core_indexes(db):
    # rutas y lugares
    for name in ENTITY_COLLECTIONS:
        await db[name].create_index("id", unique=True)
        await db[name].create_index([("created_at", -1)])
        await db[name].create_index([("status", 1)])
        # compuerta de creación: búsqueda por creador + estado
        await db[name].create_index([("created_by", 1), ("status", 1)])
    await db.places.create_index([("route_id", 1)])
    await db.routes.create_index([("city_id", 1)])
    await db.pending_gate.create_index([("kind", 1), ("created_by", 1)], unique=True)

    # interacción
    await db.comments.create_index("id", unique=True)
    await db.comments.create_index([("place_id", 1), ("created_at", -1)])
    await db.comments.create_index([("user_id", 1)])
    await db.likes.create_index([("user_id", 1), ("place_id", 1)], unique=True)
    await db.likes.create_index([("place_id", 1)])
    await db.favorites.create_index([("user_id", 1), ("place_id", 1)], unique=True)
    await db.favorites.create_index([("place_id", 1)])

    # usuarios / publicidad
    await db.users.create_index("id", unique=True)
    await db.users.create_index([("email", 1)], unique=True)
    await db.users.create_index([("role", 1)])
    await db.users.create_index([("city_id", 1)])
    await db.cities.create_index("id", unique=True)
    await db.cities.create_index([("name", 1)], unique=True)
    await db.advertising.create_index("id", unique=True)
    await db.advertising.create_index([("status", 1), ("start_date", 1), ("end_date", 1)])


async def migrate_entities_schema(db):
    for name in ENTITY_COLLECTIONS:
        await db[name].update_many({"status": {"$exists": False}}, {"$set": {"status": EntityStatus.PENDING.value}})
        await db[name].update_many({"rejection_comment": {"$exists": False}}, {"$set": {"rejection_comment": None}})
        for k, v in STATUS_SYNONYMS.items():
            await db[name].update_many({"status": k}, {"$set": {"status": v}})

    # cupos de la compuerta para pendientes ya existentes (duplicados heredados colapsan en uno)
    for name, kind in ENTITY_KINDS.items():
        cur = db[name].find({"status": EntityStatus.PENDING.value, "created_by": {"$ne": None}}, {"created_by": 1})
        async for doc in cur:
            await db.pending_gate.update_one(
                {"kind": kind.value, "created_by": doc["created_by"]},
                {"$setOnInsert": {"at": datetime.now(timezone.utc)}},
                upsert=True,
            )


async def init_data(db):
    if await db.users.find_one({"role": int(Role.ADMIN)}):
        return
    now = datetime.now(timezone.utc)
    await db.users.insert_one({
        "id": uuid.uuid4().hex,
        "name": "Administrador",
        "last_name": "Sistema",
        "email": settings.seed_admin_email.strip().lower(),
        "phone": "",
        "role": int(Role.ADMIN),
        "created_at": now,
        "password_hash": hash_password(settings.seed_admin_password),
    })
    logger.info("Administrador semilla creado: %s", settings.seed_admin_email)


async def startup_tasks():
    db = get_db()
    await ensure_core_indexes(db)
    await migrate_entities_schema(db)
    if settings.seed_admin:
        await init_data(db)
