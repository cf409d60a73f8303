import pytest
from httpx import AsyncClient

from src.domain.entities import UserRole


async def report(client, headers, **overrides):
    body = {"title": "Crowd crush at gate B", "type": "SECURITY", "priority": "HIGH"}
    body.update(overrides)
    response = await client.post("/incidents", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_escalation_flow(client: AsyncClient, seed_user):
    """
    Reported -> assigned -> worked -> escalated.

    Timeline holds one entry per step and both people involved are
    notified.
    """
    reporter = await seed_user("reporter")
    sam = await seed_user("sam", UserRole.supervisor)
    root = await seed_user("root", UserRole.admin)

    incident = await report(client, reporter.headers)
    assert incident["status"] == "NEW"
    incident_id = incident["id"]

    assigned = await client.post(
        f"/incidents/{incident_id}/assign", json={"userId": sam.id}, headers=reporter.headers
    )
    assert assigned.status_code == 200, assigned.text
    assert assigned.json()["status"] == "ASSIGNED"
    assert assigned.json()["assignedTo"] == sam.id

    working = await client.put(
        f"/incidents/{incident_id}", json={"status": "IN_PROGRESS"}, headers=sam.headers
    )
    assert working.status_code == 200, working.text

    escalated = await client.post(
        f"/incidents/{incident_id}/escalate",
        json={"userId": root.id, "reason": "Needs crowd control"},
        headers=reporter.headers,
    )
    assert escalated.status_code == 200, escalated.text
    assert escalated.json()["status"] == "ESCALATED"
    assert escalated.json()["escalatedTo"] == root.id

    timeline = await client.get(f"/incidents/{incident_id}/timeline", headers=sam.headers)
    assert timeline.status_code == 200
    items = timeline.json()["items"]
    assert [item["type"] for item in items] == [
        "CREATED",
        "ASSIGNMENT",
        "STATUS_CHANGE",
        "ESCALATION",
    ]
    assert items[1]["to"] == sam.id
    assert items[2]["from"] == "ASSIGNED"
    assert items[2]["to"] == "IN_PROGRESS"
    assert items[3]["reason"] == "Needs crowd control"
    assert escalated.json()["timeline"] == items

    sam_inbox = (await client.get("/notifications", headers=sam.headers)).json()
    root_inbox = (await client.get("/notifications", headers=root.headers)).json()
    assert [n["title"] for n in sam_inbox["items"]] == ["Incident Assigned"]
    assert sorted(n["title"] for n in root_inbox["items"]) == [
        "Incident Escalated",
        "New Incident Reported",
    ]
    assert all(n["priority"] == "high" for n in root_inbox["items"])


@pytest.mark.asyncio
async def test_new_incident_cannot_be_resolved(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")
    incident = await report(client, reporter.headers)

    response = await client.put(
        f"/incidents/{incident['id']}", json={"status": "RESOLVED"}, headers=reporter.headers
    )

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "INVALID_TRANSITION"
    assert error["details"] == {"from": "NEW", "to": "RESOLVED"}

    timeline = await client.get(f"/incidents/{incident['id']}/timeline", headers=reporter.headers)
    assert len(timeline.json()["items"]) == 1


@pytest.mark.asyncio
async def test_emergency_incident_requires_critical(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")

    rejected = await client.post(
        "/incidents",
        json={"title": "Fire in hall 3", "type": "EMERGENCY", "priority": "HIGH"},
        headers=reporter.headers,
    )
    accepted = await client.post(
        "/incidents",
        json={"title": "Fire in hall 3", "type": "EMERGENCY", "priority": "CRITICAL"},
        headers=reporter.headers,
    )

    assert rejected.status_code == 400
    error = rejected.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert error["details"][0]["field"] == "priority"
    assert accepted.status_code == 201


@pytest.mark.asyncio
async def test_update_rejects_null_type(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")
    incident = await report(client, reporter.headers)

    response = await client.put(
        f"/incidents/{incident['id']}", json={"type": None}, headers=reporter.headers
    )
    stored = await client.get(f"/incidents/{incident['id']}", headers=reporter.headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert [d["field"] for d in error["details"]] == ["type"]
    assert stored.json()["type"] == "SECURITY"
    assert len(stored.json()["timeline"]) == 1


@pytest.mark.asyncio
async def test_plain_user_cannot_delete_others_incident(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")
    eli = await seed_user("eli")
    incident = await report(client, reporter.headers)

    response = await client.delete(f"/incidents/{incident['id']}", headers=eli.headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"
    still_there = await client.get(f"/incidents/{incident['id']}", headers=reporter.headers)
    assert still_there.status_code == 200


@pytest.mark.asyncio
async def test_resolve_close_and_delete(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")
    root = await seed_user("root", UserRole.admin)
    incident = await report(client, reporter.headers)
    incident_id = incident["id"]

    await client.post(
        f"/incidents/{incident_id}/assign", json={"userId": root.id}, headers=reporter.headers
    )
    for target in ("IN_PROGRESS", "RESOLVED"):
        response = await client.put(
            f"/incidents/{incident_id}", json={"status": target}, headers=root.headers
        )
        assert response.status_code == 200, response.text
    assert response.json()["resolvedAt"] is not None

    closed = await client.put(
        f"/incidents/{incident_id}", json={"status": "CLOSED"}, headers=root.headers
    )
    assert closed.status_code == 200
    assert closed.json()["closedAt"] is not None

    locked = await client.put(
        f"/incidents/{incident_id}", json={"title": "Renamed"}, headers=root.headers
    )
    assert locked.status_code == 409

    deleted = await client.delete(f"/incidents/{incident_id}", headers=reporter.headers)
    assert deleted.status_code == 200
    gone = await client.get(f"/incidents/{incident_id}", headers=root.headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_assign_unknown_user(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")
    ghost = await seed_user("ghost", active=False)
    incident = await report(client, reporter.headers)

    response = await client.post(
        f"/incidents/{incident['id']}/assign", json={"userId": ghost.id}, headers=reporter.headers
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_incident_for_missing_event(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")

    response = await client.post(
        "/incidents",
        json={"title": "Lost child", "eventId": "7d4f8a52-0a43-4f53-a0b4-0f3c1c3b8a10"},
        headers=reporter.headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "EVENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_incidents_by_assignee(client: AsyncClient, seed_user):
    reporter = await seed_user("reporter")
    sam = await seed_user("sam", UserRole.supervisor)
    first = await report(client, reporter.headers, title="Broken barrier")
    await report(client, reporter.headers, title="Lost wallet", priority="LOW")
    await client.post(
        f"/incidents/{first['id']}/assign", json={"userId": sam.id}, headers=reporter.headers
    )

    mine = await client.get("/incidents", params={"assignedTo": sam.id}, headers=sam.headers)
    low = await client.get("/incidents", params={"priority": "LOW"}, headers=sam.headers)

    assert [i["title"] for i in mine.json()["items"]] == ["Broken barrier"]
    assert [i["title"] for i in low.json()["items"]] == ["Lost wallet"]
