from __future__ import annotations

import os

import pytest

from core.config import get_settings

settings = get_settings()
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]

SCENARIO = [
    ("Alice", "unassigned"),
    ("Bob", "confirmed"),
    ("Carol", "deferred"),
    ("Dave", "unassigned"),
    ("Eve", "pending"),
]


async def create_people(client, names) -> list[int]:
    ids = []
    for name in names:
        response = await client.post("/api/participants", json={"name": name})
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


async def open_cycle(client) -> str:
    response = await client.get("/api/cycles/current")
    assert response.status_code in (200, 201)
    cycle_id = response.json()["id"]
    response = await client.post(f"/api/cycles/{cycle_id}/sync")
    assert response.status_code == 200
    return cycle_id


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "environment": "test"}


@pytest.mark.asyncio
async def test_participant_crud(client):
    response = await client.post(
        "/api/participants", json={"name": "  Ada Lovelace ", "email": "ada@example.com"}
    )
    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "Ada Lovelace"
    assert created["has_reading"] is False

    response = await client.patch(f"/api/participants/{created['id']}", json={"has_reading": True})
    assert response.status_code == 200
    assert response.json()["has_reading"] is True

    response = await client.patch(f"/api/participants/{created['id']}", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "No valid fields to update"

    response = await client.get("/api/participants")
    assert [p["name"] for p in response.json()] == ["Ada Lovelace"]

    response = await client.delete(f"/api/participants/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = await client.delete(f"/api/participants/{created['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_participant_name_is_required(client):
    response = await client.post("/api/participants", json={"name": "   "})
    assert response.status_code == 422

    response = await client.patch("/api/participants/999", json={"name": "Nobody"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_routes_need_a_session(client):
    assert (await client.get("/api/cycles/current")).status_code == 401
    assert (await client.get("/api/audit")).status_code == 401

    client.cookies.set(settings.admin_cookie_name, "not-a-token")
    response = await client.get("/api/cycles/current")
    assert response.status_code == 401
    assert response.json()["detail"] == "Admin login required"


@pytest.mark.asyncio
async def test_login_and_logout(client):
    response = await client.post("/api/admin/login", json={"username": "admin", "password": "wrong"})
    assert response.status_code == 401

    response = await client.get("/api/admin/session")
    assert response.json() == {"authenticated": False}

    response = await client.post(
        "/api/admin/login", json={"username": settings.admin_username, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert settings.admin_cookie_name in response.cookies

    response = await client.get("/api/admin/session")
    assert response.json() == {"authenticated": True}
    assert (await client.get("/api/cycles/current")).status_code in (200, 201)

    response = await client.post("/api/admin/logout")
    assert response.status_code == 200

    response = await client.get("/api/admin/session")
    assert response.json() == {"authenticated": False}
    assert (await client.get("/api/cycles/current")).status_code == 401


@pytest.mark.asyncio
async def test_current_cycle_is_created_once(admin_client):
    first = await admin_client.get("/api/cycles/current")
    assert first.status_code == 201
    body = first.json()
    assert body["table_start_index"] == 0
    assert body["next_table_start_index"] is None

    second = await admin_client.get("/api/cycles/current")
    assert second.status_code == 200
    assert second.json()["id"] == body["id"]


@pytest.mark.asyncio
async def test_weekly_roster_flow(admin_client):
    ids = await create_people(admin_client, [name for name, _ in SCENARIO])
    cycle_id = await open_cycle(admin_client)

    response = await admin_client.get(f"/api/cycles/{cycle_id}/participants")
    rows = response.json()
    assert [row["name"] for row in rows] == ["Alice", "Bob", "Carol", "Dave", "Eve"]
    assert {row["attendance"] for row in rows} == {"unknown"}

    response = await admin_client.get(f"/api/cycles/{cycle_id}/groups")
    assert response.status_code == 200
    assert response.json()["error"] == "No attendees for this week."

    for pid, (_, reading) in zip(ids, SCENARIO):
        response = await admin_client.patch(
            f"/api/cycles/{cycle_id}/participants/{pid}",
            json={"attendance": "yes", "reading": reading},
        )
        assert response.status_code == 200
        assert response.json()["responded_at"] is not None

    response = await admin_client.get(f"/api/cycles/{cycle_id}/groups")
    groups = response.json()
    assert groups["error"] is None
    assert sorted(p["name"] for p in groups["table"]) == ["Alice", "Bob", "Carol", "Dave", "Eve"]
    assert groups["lounge"] == []
    assert [p["name"] for p in groups["readers"]["table"]["scheduled"]] == ["Bob", "Alice", "Dave", "Eve"]
    assert groups["readers"]["table"]["bonus"] == []
    assert groups["up_next"]["table"]["name"] == "Eve"
    assert groups["up_next"]["lounge"] is None
    assert groups["next_cursor"] == {"table_start_index": 0, "lounge_start_index": 0}
    assert [p["name"] for p in groups["rosters"]["table"]] == ["Alice", "Bob", "Dave", "Eve"]

    # previewing does not commit the rotation
    response = await admin_client.get("/api/cycles/current")
    assert response.json()["next_table_start_index"] is None

    response = await admin_client.post(f"/api/cycles/{cycle_id}/advance")
    assert response.status_code == 200
    assert response.json()["next_table_start_index"] == 0
    assert response.json()["advanced_at"] is not None


@pytest.mark.asyncio
async def test_cycle_participant_updates(admin_client):
    (pid,) = await create_people(admin_client, ["Alice"])
    cycle_id = await open_cycle(admin_client)
    url = f"/api/cycles/{cycle_id}/participants/{pid}"

    response = await admin_client.patch(url, json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "No fields to update"

    response = await admin_client.patch(url, json={"attendance": "perhaps"})
    assert response.status_code == 422

    response = await admin_client.patch(url, json={"reading_description": "  " + "x" * 400})
    assert response.status_code == 200
    assert response.json()["reading_description"] == "x" * 300
    assert response.json()["attendance"] == "unknown"

    response = await admin_client.patch(f"/api/cycles/{cycle_id}/participants/{pid + 50}", json={"attendance": "no"})
    assert response.status_code == 404

    response = await admin_client.delete(url)
    assert response.json() == {"success": True}
    response = await admin_client.get(f"/api/cycles/{cycle_id}/participants")
    assert response.json() == []

    # a later sync brings the person back with a fresh row
    await admin_client.post(f"/api/cycles/{cycle_id}/sync")
    rows = (await admin_client.get(f"/api/cycles/{cycle_id}/participants")).json()
    assert [(row["id"], row["reading_description"]) for row in rows] == [(pid, None)]


@pytest.mark.asyncio
async def test_deleting_participant_drops_weekly_rows(admin_client):
    alice, bob = await create_people(admin_client, ["Alice", "Bob"])
    cycle_id = await open_cycle(admin_client)

    response = await admin_client.delete(f"/api/participants/{alice}")
    assert response.status_code == 200

    rows = (await admin_client.get(f"/api/cycles/{cycle_id}/participants")).json()
    assert [row["id"] for row in rows] == [bob]


@pytest.mark.asyncio
async def test_unknown_cycle_returns_404(admin_client):
    for method, path in [
        ("post", "/api/cycles/missing/sync"),
        ("get", "/api/cycles/missing/participants"),
        ("get", "/api/cycles/missing/groups"),
        ("post", "/api/cycles/missing/advance"),
    ]:
        response = await getattr(admin_client, method)(path)
        assert response.status_code == 404, path


@pytest.mark.asyncio
async def test_audit_log_records_admin_actions(admin_client):
    (pid,) = await create_people(admin_client, ["Alice"])
    cycle_id = await open_cycle(admin_client)
    await admin_client.patch(f"/api/cycles/{cycle_id}/participants/{pid}", json={"attendance": "yes"})
    await admin_client.post(f"/api/cycles/{cycle_id}/advance")

    response = await admin_client.get("/api/audit")
    assert response.status_code == 200
    entries = response.json()
    assert [entry["action"] for entry in entries] == [
        "advance_cycle",
        "update_cycle_participant",
        "sync_cycle",
        "create_participant",
    ]
    assert entries[0]["actor"] == settings.admin_username
    assert entries[1]["meta"]["fields"] == ["attendance"]
    assert entries[2]["meta"] == {"cycle_id": cycle_id, "ensured": 1}
    assert entries[3]["actor"] == "public"


@pytest.mark.asyncio
async def test_split_week_groups_are_stable_until_advanced(admin_client):
    ids = await create_people(admin_client, [f"Person{i:02d}" for i in range(12)])
    cycle_id = await open_cycle(admin_client)
    for index, pid in enumerate(ids):
        reading = "confirmed" if index < 3 else "unassigned"
        response = await admin_client.patch(
            f"/api/cycles/{cycle_id}/participants/{pid}",
            json={"attendance": "yes", "reading": reading},
        )
        assert response.status_code == 200

    first = (await admin_client.get(f"/api/cycles/{cycle_id}/groups")).json()
    second = (await admin_client.get(f"/api/cycles/{cycle_id}/groups")).json()
    assert first["lounge"]
    assert first == second

    response = await admin_client.post(f"/api/cycles/{cycle_id}/advance")
    cycle = response.json()
    assert cycle["next_table_start_index"] == first["next_cursor"]["table_start_index"]
    assert cycle["next_lounge_start_index"] == first["next_cursor"]["lounge_start_index"]
