import pytest
from fastapi.testclient import TestClient

from rutacafe.api.deps import get_current_user
from rutacafe.core.security import create_access_token, hash_password
from rutacafe.main import app
from rutacafe.models.common import EntityKind, Role
from rutacafe.repositories import comments_repo, favorites_repo, likes_repo, users_repo

USERS = {
    "admin-1": {"id": "admin-1", "name": "Ana", "last_name": "Admin", "email": "ana@rutacafe.co", "role": 1},
    "tech-1": {"id": "tech-1", "name": "Tito", "last_name": "Tec", "email": "tito@rutacafe.co", "role": 2},
    "user-1": {"id": "user-1", "name": "Ulises", "last_name": "Uso", "email": "uli@rutacafe.co", "role": 3},
}


@pytest.fixture
def client(store, monkeypatch):
    async def zero(*args, **kwargs):
        return 0

    async def no(*args, **kwargs):
        return False

    monkeypatch.setattr(likes_repo, "count_by_place", zero)
    monkeypatch.setattr(comments_repo, "count_by_place", zero)
    monkeypatch.setattr(favorites_repo, "count_by_place", zero)
    monkeypatch.setattr(likes_repo, "user_liked", no)
    monkeypatch.setattr(favorites_repo, "is_favorite", no)
    # sin context manager: no corre el startup (no hay Mongo en los tests)
    yield TestClient(app)
    app.dependency_overrides.clear()


def login_as(user_id):
    app.dependency_overrides[get_current_user] = lambda: USERS[user_id]


def bearer(user_id):
    token = create_access_token(sub=user_id, role=USERS[user_id]["role"])
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_visitor_lists_only_approved_routes(client, store):
    store.add(EntityKind.ROUTE, status="aprobada", created_by="tech-1", name="A")
    store.add(EntityKind.ROUTE, status="pendiente", created_by="tech-1", name="B")
    store.add(EntityKind.ROUTE, status="rechazada", created_by="tech-1", name="C")

    res = client.get("/api/routes")
    assert res.status_code == 200
    assert [r["name"] for r in res.json()] == ["A"]


def test_technician_token_lists_own_routes(client, store):
    store.add(EntityKind.ROUTE, status="aprobada", created_by="tech-2", name="A")
    store.add(EntityKind.ROUTE, status="pendiente", created_by="tech-1", name="B")
    store.add(EntityKind.ROUTE, status="pendiente", created_by="tech-2", name="C")

    res = client.get("/api/routes", headers=bearer("tech-1"))
    assert [r["name"] for r in res.json()] == ["B", "A"]


def test_invalid_token_browses_as_visitor(client, store):
    store.add(EntityKind.ROUTE, status="pendiente", created_by="tech-1", name="B")
    res = client.get("/api/routes", headers={"Authorization": "Bearer basura"})
    assert res.status_code == 200
    assert res.json() == []


def test_hidden_route_detail_is_404(client, store):
    route = store.add(EntityKind.ROUTE, status="pendiente", created_by="tech-1")
    assert client.get(f"/api/routes/{route['id']}").status_code == 404
    assert client.get(f"/api/routes/{route['id']}", headers=bearer("tech-1")).status_code == 200


def test_technician_cannot_change_status(client, store):
    route = store.add(EntityKind.ROUTE, status="pendiente", created_by="tech-1")
    login_as("tech-1")
    res = client.patch(f"/api/routes/{route['id']}/status", json={"status": "aprobada"})
    assert res.status_code == 403
    assert store.get(EntityKind.ROUTE, route["id"])["status"] == "pendiente"


def test_admin_rejection_needs_comment(client, store):
    place = store.add(EntityKind.PLACE, status="pendiente", created_by="tech-1")
    login_as("admin-1")
    res = client.patch(f"/api/places/{place['id']}/status", json={"status": "rechazada", "rejection_comment": " "})
    assert res.status_code == 422
    assert res.json()["detail"] == "comentario de rechazo requerido"

    res = client.patch(f"/api/places/{place['id']}/status",
                       json={"status": "rechazada", "rejection_comment": "Ubicación duplicada"})
    assert res.status_code == 200
    assert res.json()["status"] == "rechazada"
    assert res.json()["rejection_comment"] == "Ubicación duplicada"


def test_creation_gate_over_http(client, store):
    route = store.add(EntityKind.ROUTE, status="aprobada", created_by="tech-1")
    body = {"name": "Café", "description": "Tostador local", "latitude": 4.5, "longitude": -75.6,
            "route_id": route["id"]}
    login_as("tech-1")

    assert client.get("/api/places/can-create").json()["can_create"] is True
    first = client.post("/api/places", json=body)
    assert first.status_code == 201
    assert first.json()["status"] == "pendiente"

    assert client.get("/api/places/can-create").json()["can_create"] is False
    second = client.post("/api/places", json=dict(body, name="Otro"))
    assert second.status_code == 409


def test_user_cannot_create_routes(client, store):
    login_as("user-1")
    res = client.post("/api/routes", json={"name": "Ruta", "description": "x"})
    assert res.status_code == 403


def test_place_coordinates_are_validated(client, store):
    login_as("tech-1")
    res = client.post("/api/places", json={"name": "X", "description": "Y", "latitude": 120,
                                           "longitude": 0, "route_id": "r"})
    assert res.status_code == 422


def test_rejected_place_hides_contact_for_creator(client, store):
    place = store.add(EntityKind.PLACE, status="rechazada", created_by="tech-1",
                      phone_number="555-0100", website="https://cafe.example")
    res = client.get(f"/api/places/{place['id']}", headers=bearer("tech-1"))
    assert res.status_code == 200
    body = res.json()
    assert "phone_number" not in body
    assert body["actions"]["edit"] is True
    assert body["actions"]["like"] is True

    admin_view = client.get(f"/api/places/{place['id']}", headers=bearer("admin-1")).json()
    assert admin_view["phone_number"] == "555-0100"


def test_route_with_places_cannot_be_deleted(client, store):
    route = store.add(EntityKind.ROUTE, status="aprobada", created_by="tech-1")
    store.add(EntityKind.PLACE, status="aprobada", created_by="tech-1", route_id=route["id"])
    login_as("tech-1")
    assert client.delete(f"/api/routes/{route['id']}").status_code == 409


def test_pending_queue_requires_admin(client, store):
    store.add(EntityKind.ROUTE, status="pendiente", created_by="tech-1")
    login_as("tech-1")
    assert client.get("/api/routes/pending").status_code == 403
    login_as("admin-1")
    assert len(client.get("/api/routes/pending").json()) == 1


def test_mobile_login_refuses_admins(client, monkeypatch):
    stored = {}
    for uid in ("admin-1", "user-1"):
        stored[USERS[uid]["email"]] = dict(USERS[uid], password_hash=hash_password("Secreto1"))

    async def find_by_email(email):
        return stored.get(email.strip().lower())

    monkeypatch.setattr(users_repo, "find_by_email", find_by_email)

    res = client.post("/api/auth/login", json={"email": "ana@rutacafe.co", "password": "Secreto1"})
    assert res.status_code == 403

    res = client.post("/api/auth/login", json={"email": "uli@rutacafe.co", "password": "Secreto1"})
    assert res.status_code == 200
    assert res.json()["user"]["role"] == Role.USER
    assert "password_hash" not in res.json()["user"]
