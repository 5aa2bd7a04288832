# rutacafe/core/db.py
from typing import Optional

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from rutacafe.core.config import settings

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None


def get_client() -> AsyncIOMotorClient:
    """
    Crea un único cliente Motor. Con MONGO_TLS=true usa el CA bundle de certifi
    (requerido en Atlas / mongodb+srv).
    """
    global _client
    if _client is None:
        kwargs = {"serverSelectionTimeoutMS": 20000}
        if settings.mongo_tls:
            kwargs.update(tls=True, tlsCAFile=certifi.where())
        _client = AsyncIOMotorClient(settings.mongo_url, **kwargs)
    return _client


def get_db() -> AsyncIOMotorDatabase:
    global _db
    if _db is None:
        _db = get_client()[settings.db_name]
    return _db


async def close_db() -> None:
    """Cierra el cliente global. Usado por main.py en shutdown."""
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
