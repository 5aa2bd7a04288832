# rutacafe/utils/mongo_helpers.py
from typing import Iterable

from bson import ObjectId

# Nunca salen en una respuesta
PRIVATE_FIELDS = ("password_hash",)


def fix_mongo_id(doc, hide: Iterable[str] = ()):
    """
    Prepara un documento para la respuesta: quita `_id` y los campos de
    `hide` del nivel superior, y convierte cualquier ObjectId anidado en string.
    """
    if not doc:
        return doc

    if isinstance(doc, list):
        return [fix_mongo_id(d, hide) for d in doc]

    if isinstance(doc, dict):
        drop = {"_id", *hide}
        new_doc = {}
        for k, v in doc.items():
            if k in drop:
                continue
            new_doc[k] = str(v) if isinstance(v, ObjectId) else fix_mongo_id(v)
        return new_doc

    return doc


def public_user(doc):
    return fix_mongo_id(doc, hide=PRIVATE_FIELDS)
