import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.settings import Settings
from app.store.memory_repo import MemoryRepo


@pytest.fixture
def client(catalog):
    settings = Settings(LONG_POLL_TIMEOUT_SEC=0.05, LONG_POLL_INTERVAL_SEC=0.01)
    app = create_app(settings=settings, repo=MemoryRepo(), catalog=catalog)
    with TestClient(app) as c:
        yield c


def _create(client, sid="a", **extra):
    res = client.post("/api/rooms/create", json={"session_id": sid, "display_name": sid.upper(), **extra})
    assert res.status_code == 200
    return res.json()["state"]


def test_health_and_games(client):
    assert client.get("/health").json()["ok"] is True
    games = client.get("/api/games").json()["games"]
    assert {g["id"] for g in games} == {"fact-or-fake", "true-or-false"}


def test_create_join_act_and_sync(client):
    state = _create(client)
    code = state["room_code"]
    assert state["joined"] is True
    assert state["version"] == 1

    for sid in ("b", "c"):
        res = client.post("/api/rooms/join", json={"session_id": sid, "room_code": code.lower(), "display_name": sid})
        assert res.status_code == 200

    res = client.post(f"/api/rooms/{code}/action", json={"session_id": "a", "action": {"type": "start_round"}})
    assert res.status_code == 200
    assert res.headers["cache-control"] == "no-store"
    state = res.json()["state"]
    assert state["phase"] == "discussion"
    assert state["round"]["my_card"]

    res = client.get(f"/api/rooms/{code}/sync", params={"session_id": "b", "since": 0})
    assert res.status_code == 200
    assert res.headers["cache-control"] == "no-store"
    assert res.json()["state"]["version"] == state["version"]

    res = client.get(f"/api/rooms/{code}/sync", params={"session_id": "b", "since": state["version"]})
    assert res.json()["state"]["version"] == state["version"]


def test_errors_use_taxonomy(client):
    code = _create(client)["room_code"]

    res = client.post(f"/api/rooms/{code}/action", json={"session_id": "a", "action": {"type": "start_round"}})
    assert res.status_code == 409
    body = res.json()
    assert body["type"] == "error"
    assert body["kind"] == "conflict"
    assert body["code"] == "NOT_ENOUGH_PLAYERS"

    res = client.post("/api/rooms/QQQQQ/action", json={"session_id": "a", "action": {"type": "start_round"}})
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"

    res = client.post("/api/rooms/create", json={"session_id": "a", "display_name": "   "})
    assert res.status_code == 400
    assert res.json()["code"] == "NO_NAME"


def test_malformed_bodies(client):
    code = _create(client)["room_code"]

    res = client.post(f"/api/rooms/{code}/action", json={"session_id": "a", "action": {"type": "explode"}})
    assert res.status_code == 400
    assert res.json()["code"] == "BAD_MESSAGE"

    res = client.post("/api/rooms/join", content=b"not json", headers={"content-type": "application/json"})
    assert res.status_code == 400
    assert res.json()["code"] == "BAD_MESSAGE"

    res = client.get(f"/api/rooms/{code}/sync", params={"session_id": "a", "since": "abc"})
    assert res.status_code == 400
    assert res.json()["code"] == "BAD_VERSION"


def test_admin_list_and_close(client):
    code = _create(client)["room_code"]

    rooms = client.get("/admin/rooms").json()["rooms"]
    assert [r["room_code"] for r in rooms] == [code]
    assert rooms[0]["players"] == 1

    res = client.post(f"/admin/rooms/{code}/close")
    assert res.json() == {"ok": True, "room_code": code}
    assert client.get("/admin/rooms").json()["rooms"] == []
    assert client.post(f"/admin/rooms/{code}/close").status_code == 404
