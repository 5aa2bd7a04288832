import os
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

# Configura las variables requeridas antes de importar el backend.
os.environ.setdefault("MONGO_URL", "mongodb://localhost:27017/test")
os.environ.setdefault("DB_NAME", "test_db")
os.environ.setdefault("SECRET_KEY", "rutacafe-test-secret-key-0123456789abcdef")

from rutacafe.models.common import EntityKind, EntityStatus, Role, Viewer  # noqa: E402
from rutacafe.repositories import (  # noqa: E402
    comments_repo,
    entities_repo,
    favorites_repo,
    likes_repo,
    pending_gate_repo,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def matches(doc, filt):
    """Evalúa el subconjunto de filtros MongoDB que usa el backend ($and, $or, $in, $ne, igualdad)."""
    for key, expected in (filt or {}).items():
        if key == "$and":
            if not all(matches(doc, f) for f in expected):
                return False
        elif key == "$or":
            if not any(matches(doc, f) for f in expected):
                return False
        elif isinstance(expected, dict) and "$in" in expected:
            if doc.get(key) not in expected["$in"]:
                return False
        elif isinstance(expected, dict) and "$ne" in expected:
            if doc.get(key) == expected["$ne"]:
                return False
        elif doc.get(key) != expected:
            return False
    return True


class FakeEntityStore:
    """Almacén en memoria con la misma interfaz async que entities_repo."""

    def __init__(self):
        self.rows = {EntityKind.ROUTE: [], EntityKind.PLACE: []}
        self._seq = count(1)

    def add(self, kind, **fields):
        n = next(self._seq)
        doc = {
            "id": f"{EntityKind(kind).value}-{n}",
            "status": EntityStatus.PENDING.value,
            "created_by": None,
            "rejection_comment": None,
            "created_at": BASE_TIME + timedelta(seconds=n),
            "state_history": [],
        }
        doc.update(fields)
        self.rows[EntityKind(kind)].append(doc)
        return doc

    def get(self, kind, entity_id):
        for doc in self.rows[EntityKind(kind)]:
            if doc["id"] == entity_id:
                return doc
        return None

    async def find_by_id(self, kind, entity_id):
        doc = self.get(kind, entity_id)
        return dict(doc) if doc else None

    async def list_all(self, kind, filt=None):
        docs = [dict(d) for d in self.rows[EntityKind(kind)] if matches(d, filt)]
        return sorted(docs, key=lambda d: d["created_at"], reverse=True)

    async def list_by_creator(self, kind, creator_id):
        return await self.list_all(kind, {"created_by": creator_id})

    async def update(self, kind, entity_id, fields, push=None):
        doc = self.get(kind, entity_id)
        if not doc:
            return 0
        doc.update(fields)
        for key, value in (push or {}).items():
            doc.setdefault(key, []).append(value)
        return 1

    async def create(self, kind, fields):
        doc = self.add(kind, **fields)
        doc["status"] = EntityStatus.PENDING.value
        doc["rejection_comment"] = None
        return doc["id"]

    async def delete(self, kind, entity_id):
        doc = self.get(kind, entity_id)
        if not doc:
            return 0
        self.rows[EntityKind(kind)].remove(doc)
        return 1

    async def count(self, kind, filt):
        return len([d for d in self.rows[EntityKind(kind)] if matches(d, filt)])


class FakePendingGate:
    """Índice único (kind, created_by) de pending_gate."""

    def __init__(self):
        self.slots = set()

    async def claim(self, kind, creator_id):
        key = (EntityKind(kind).value, creator_id)
        if key in self.slots:
            return False
        self.slots.add(key)
        return True

    async def release(self, kind, creator_id):
        key = (EntityKind(kind).value, creator_id)
        if key not in self.slots:
            return 0
        self.slots.discard(key)
        return 1


@pytest.fixture
def store(monkeypatch):
    fake = FakeEntityStore()
    for name in ("find_by_id", "list_all", "list_by_creator", "update", "create", "delete", "count"):
        monkeypatch.setattr(entities_repo, name, getattr(fake, name))
    fake.gate = FakePendingGate()
    monkeypatch.setattr(pending_gate_repo, "claim", fake.gate.claim)
    monkeypatch.setattr(pending_gate_repo, "release", fake.gate.release)
    return fake


@pytest.fixture
def admin():
    return Viewer(role=Role.ADMIN, id="admin-1")


@pytest.fixture
def technician():
    return Viewer(role=Role.TECHNICIAN, id="tech-1")


@pytest.fixture
def other_technician():
    return Viewer(role=Role.TECHNICIAN, id="tech-2")


@pytest.fixture
def user():
    return Viewer(role=Role.USER, id="user-1")


@pytest.fixture
def visitor():
    return Viewer.anonymous()


@pytest.fixture
def mongo_match():
    return matches


class FakeEngagement:
    """Comentarios, likes y favoritos en memoria, unidos a los lugares del FakeEntityStore."""

    def __init__(self, store):
        self.store = store
        self.comments = []
        self.likes = set()
        self.favorites = []
        self._seq = count(1)

    def _place_row(self, place_id, **extra):
        place = self.store.get(EntityKind.PLACE, place_id) or {}
        row = {"place_id": place_id, "place_name": place.get("name"),
               "status": place.get("status"), "created_by": place.get("created_by")}
        row.update(extra)
        return row

    # --- comentarios ---
    async def comment_create(self, place_id, user, text):
        doc = {"id": f"c-{next(self._seq)}", "place_id": place_id, "user_id": user["id"],
               "user_name": f'{user.get("name", "")} {user.get("last_name", "")}'.strip(),
               "comment": text, "created_at": BASE_TIME}
        self.comments.append(doc)
        return dict(doc)

    async def comment_list_by_place(self, place_id, limit=500):
        return [dict(c) for c in self.comments if c["place_id"] == place_id][:limit]

    async def comment_find_by_id(self, comment_id):
        for c in self.comments:
            if c["id"] == comment_id:
                return dict(c)
        return None

    async def comment_update_text(self, comment_id, text):
        for c in self.comments:
            if c["id"] == comment_id:
                c["comment"] = text
                return dict(c)
        return None

    async def comment_delete(self, comment_id):
        before = len(self.comments)
        self.comments = [c for c in self.comments if c["id"] != comment_id]
        return before - len(self.comments)

    async def comment_delete_by_place(self, place_id):
        before = len(self.comments)
        self.comments = [c for c in self.comments if c["place_id"] != place_id]
        return before - len(self.comments)

    async def comment_count_by_place(self, place_id):
        return len([c for c in self.comments if c["place_id"] == place_id])

    async def comment_top_places(self, n=5):
        return []

    # --- likes ---
    async def like_toggle(self, user_id, place_id):
        key = (user_id, place_id)
        if key in self.likes:
            self.likes.discard(key)
            return False
        self.likes.add(key)
        return True

    async def like_count_by_place(self, place_id):
        return len([k for k in self.likes if k[1] == place_id])

    async def like_user_liked(self, user_id, place_id):
        return (user_id, place_id) in self.likes

    async def like_liked_places(self, user_id):
        return [self._place_row(p) for u, p in sorted(self.likes) if u == user_id]

    async def like_delete_by_place(self, place_id):
        gone = {k for k in self.likes if k[1] == place_id}
        self.likes -= gone
        return len(gone)

    async def like_top_places(self, n=5):
        totals = {}
        for _, place_id in self.likes:
            totals[place_id] = totals.get(place_id, 0) + 1
        ranked = sorted(totals.items(), key=lambda kv: -kv[1])[:n]
        return [{"place_id": p, "name": (self.store.get(EntityKind.PLACE, p) or {}).get("name"), "total": t}
                for p, t in ranked]

    # --- favoritos ---
    async def fav_is_favorite(self, user_id, place_id):
        return any(f["user_id"] == user_id and f["place_id"] == place_id for f in self.favorites)

    async def fav_create(self, user_id, place_id):
        if await self.fav_is_favorite(user_id, place_id):
            return None
        doc = {"id": f"f-{next(self._seq)}", "user_id": user_id, "place_id": place_id, "created_at": BASE_TIME}
        self.favorites.append(doc)
        return dict(doc)

    async def fav_delete(self, user_id, place_id):
        for f in self.favorites:
            if f["user_id"] == user_id and f["place_id"] == place_id:
                self.favorites.remove(f)
                return dict(f)
        return None

    async def fav_list_by_user(self, user_id):
        # sin el $match del pipeline: el filtro de estado lo aplica la ruta
        return [self._place_row(f["place_id"], id=f["id"]) for f in self.favorites if f["user_id"] == user_id]

    async def fav_count_by_place(self, place_id):
        return len([f for f in self.favorites if f["place_id"] == place_id])

    async def fav_delete_by_place(self, place_id):
        before = len(self.favorites)
        self.favorites = [f for f in self.favorites if f["place_id"] != place_id]
        return before - len(self.favorites)


@pytest.fixture
def engagement(store, monkeypatch):
    fake = FakeEngagement(store)
    patches = {
        comments_repo: {
            "create": fake.comment_create, "list_by_place": fake.comment_list_by_place,
            "find_by_id": fake.comment_find_by_id, "update_text": fake.comment_update_text,
            "delete": fake.comment_delete, "delete_by_place": fake.comment_delete_by_place,
            "count_by_place": fake.comment_count_by_place, "top_places": fake.comment_top_places,
        },
        likes_repo: {
            "toggle": fake.like_toggle, "count_by_place": fake.like_count_by_place,
            "user_liked": fake.like_user_liked, "liked_places": fake.like_liked_places,
            "delete_by_place": fake.like_delete_by_place, "top_places": fake.like_top_places,
        },
        favorites_repo: {
            "is_favorite": fake.fav_is_favorite, "create": fake.fav_create, "delete": fake.fav_delete,
            "list_by_user": fake.fav_list_by_user, "count_by_place": fake.fav_count_by_place,
            "delete_by_place": fake.fav_delete_by_place,
        },
    }
    for module, funcs in patches.items():
        for name, func in funcs.items():
            monkeypatch.setattr(module, name, func)
    return fake
