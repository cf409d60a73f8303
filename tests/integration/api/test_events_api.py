import pytest
from httpx import AsyncClient

from src.domain.entities import UserRole


async def create_event(client, headers, **overrides):
    body = {
        "name": "Harbour Festival",
        "type": "PLANNED",
        "priority": "HIGH",
        "startDate": "2024-06-01T10:00:00Z",
        "endDate": "2024-06-02T22:00:00Z",
        "tags": ["outdoor", "outdoor"],
    }
    body.update(overrides)
    response = await client.post("/events", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, seed_user):
    """New events start as DRAFT and belong to the caller"""
    dana = await seed_user("dana")

    data = await create_event(client, dana.headers)

    assert data["status"] == "DRAFT"
    assert data["createdBy"] == dana.id
    assert data["tags"] == ["outdoor"]
    assert data["canEdit"] is True
    assert data["isActive"] is False
    assert data["version"] == 1


@pytest.mark.asyncio
async def test_create_event_requires_token(client: AsyncClient):
    response = await client.post("/events", json={"name": "Harbour Festival"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_create_event_end_before_start(client: AsyncClient, seed_user):
    dana = await seed_user("dana")

    response = await client.post(
        "/events",
        json={
            "name": "Harbour Festival",
            "startDate": "2024-06-02T10:00:00Z",
            "endDate": "2024-06-01T10:00:00Z",
        },
        headers=dana.headers,
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"


@pytest.mark.asyncio
async def test_event_lifecycle(client: AsyncClient, seed_user):
    """DRAFT -> PLANNED -> ACTIVE -> COMPLETED with one history entry per step"""
    dana = await seed_user("dana")
    event = await create_event(client, dana.headers)

    states = {}
    for target in ("PLANNED", "ACTIVE", "COMPLETED"):
        response = await client.put(
            f"/events/{event['id']}/status", json={"status": target}, headers=dana.headers
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == target
        states[target] = response.json()

    active = states["ACTIVE"]
    assert active["isActive"] is True
    assert active["canEdit"] is False
    assert active["canComplete"] is True
    assert active["canCancel"] is True
    completed = states["COMPLETED"]
    assert completed["isActive"] is False
    assert completed["canComplete"] is False
    assert completed["canCancel"] is False

    history = await client.get(f"/events/{event['id']}/history", headers=dana.headers)
    assert history.status_code == 200
    body = history.json()
    assert body["total"] == 4
    actions = [item["action"] for item in body["items"]]
    assert actions == ["STATUS_CHANGE", "STATUS_CHANGE", "STATUS_CHANGE", "CREATED"]
    assert body["items"][0]["previousStatus"] == "ACTIVE"
    assert body["items"][0]["newStatus"] == "COMPLETED"


@pytest.mark.asyncio
async def test_draft_cannot_jump_to_active(client: AsyncClient, seed_user):
    dana = await seed_user("dana")
    event = await create_event(client, dana.headers)

    response = await client.put(
        f"/events/{event['id']}/status", json={"status": "ACTIVE"}, headers=dana.headers
    )

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "INVALID_TRANSITION"
    assert error["details"] == {"from": "DRAFT", "to": "ACTIVE"}


@pytest.mark.asyncio
async def test_update_event_records_changes(client: AsyncClient, seed_user):
    dana = await seed_user("dana")
    event = await create_event(client, dana.headers)

    response = await client.put(
        f"/events/{event['id']}", json={"venue": "Pier 4"}, headers=dana.headers
    )

    assert response.status_code == 200
    assert response.json()["venue"] == "Pier 4"
    assert response.json()["version"] == 2

    history = await client.get(
        f"/events/{event['id']}/history", params={"action": "UPDATED"}, headers=dana.headers
    )
    items = history.json()["items"]
    assert len(items) == 1
    assert items[0]["changes"]["venue"] == {"from": None, "to": "Pier 4"}


@pytest.mark.asyncio
async def test_update_rejects_null_type_and_priority(client: AsyncClient, seed_user):
    dana = await seed_user("dana")
    event = await create_event(client, dana.headers)

    response = await client.put(
        f"/events/{event['id']}", json={"type": None, "priority": None}, headers=dana.headers
    )
    stored = await client.get(f"/events/{event['id']}", headers=dana.headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert sorted(d["field"] for d in error["details"]) == ["priority", "type"]
    assert stored.json()["type"] == "PLANNED"
    assert stored.json()["version"] == 1


@pytest.mark.asyncio
async def test_only_creator_or_admin_may_edit(client: AsyncClient, seed_user):
    dana = await seed_user("dana")
    eli = await seed_user("eli")
    root = await seed_user("root", UserRole.admin)
    event = await create_event(client, dana.headers)

    forbidden = await client.put(
        f"/events/{event['id']}", json={"venue": "Pier 4"}, headers=eli.headers
    )
    allowed = await client.put(
        f"/events/{event['id']}", json={"venue": "Pier 5"}, headers=root.headers
    )

    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "FORBIDDEN"
    assert allowed.status_code == 200


@pytest.mark.asyncio
async def test_active_event_cannot_be_deleted(client: AsyncClient, seed_user):
    dana = await seed_user("dana")
    event = await create_event(client, dana.headers)
    for target in ("PLANNED", "ACTIVE"):
        await client.put(
            f"/events/{event['id']}/status", json={"status": target}, headers=dana.headers
        )

    response = await client.delete(f"/events/{event['id']}", headers=dana.headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"


@pytest.mark.asyncio
async def test_delete_event(client: AsyncClient, seed_user):
    dana = await seed_user("dana")
    event = await create_event(client, dana.headers)

    response = await client.delete(f"/events/{event['id']}", headers=dana.headers)
    missing = await client.get(f"/events/{event['id']}", headers=dana.headers)

    assert response.status_code == 200
    assert response.json()["id"] == event["id"]
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "EVENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_events_filters(client: AsyncClient, seed_user):
    dana = await seed_user("dana")
    first = await create_event(client, dana.headers, name="Harbour Festival")
    await create_event(client, dana.headers, name="Night Market", priority="LOW")
    await client.put(
        f"/events/{first['id']}/status", json={"status": "PLANNED"}, headers=dana.headers
    )

    planned = await client.get("/events", params={"status": "PLANNED"}, headers=dana.headers)
    searched = await client.get("/events", params={"search": "market"}, headers=dana.headers)
    page = await client.get(
        "/events", params={"limit": 1, "sortBy": "name", "sortOrder": "asc"}, headers=dana.headers
    )

    assert [e["name"] for e in planned.json()["items"]] == ["Harbour Festival"]
    assert [e["name"] for e in searched.json()["items"]] == ["Night Market"]
    assert page.json()["total"] == 2
    assert [e["name"] for e in page.json()["items"]] == ["Harbour Festival"]


@pytest.mark.asyncio
async def test_list_limit_is_capped(client: AsyncClient, seed_user):
    dana = await seed_user("dana")

    response = await client.get("/events", params={"limit": 500}, headers=dana.headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_FAILED"
