from contextlib import asynccontextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import Session, SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.app import create_app
from src.api.utils.jwt import generate_jwt
from src.depends import get_unit_of_work
from src.domain.entities import User, UserRole

DB_FILE = "./test_ws.db"


class WebSocketConfig(ApplicationConfig):
    DB_CREATE_TABLES = False
    ENVIRONMENT = "test"
    ENABLE_LOGGING_MIDDLEWARE = False
    JWT_SECRET = "websocket-secret"
    WS_MAX_MESSAGE_BYTES = 1024
    SMTP_HOST = ""


def token_for(user: User) -> str:
    return generate_jwt(user.id, user.role.value, WebSocketConfig.JWT_SECRET, 60)


@pytest.fixture
def users():
    engine = create_engine(f"sqlite:///{DB_FILE}")
    SQLModel.metadata.create_all(engine)
    seeded = {
        "dana": User(
            username="dana", email="dana@example.com", password_hash="x" * 60, role=UserRole.user
        ),
        "root": User(
            username="root", email="root@example.com", password_hash="x" * 60, role=UserRole.admin
        ),
    }
    with Session(engine, expire_on_commit=False) as session:
        session.add_all(seeded.values())
        session.commit()
    yield seeded
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(users):
    engine = create_async_engine(f"sqlite+aiosqlite:///{DB_FILE}", poolclass=NullPool)
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    @asynccontextmanager
    async def uow_scope():
        async with factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    async def override_get_unit_of_work():
        async with factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app = create_app(WebSocketConfig, uow_scope=uow_scope)
    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    with TestClient(app) as test_client:
        yield test_client


def test_connect_requires_valid_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws?token=garbage"):
            pass

    assert exc_info.value.code == 1008


def test_greeting_and_ping(client, users):
    dana = users["dana"]

    with client.websocket_connect(f"/ws?token={token_for(dana)}") as ws:
        assert ws.receive_json() == {"type": "connected", "userId": str(dana.id)}

        ws.send_json({"type": "ping"})
        pong = ws.receive_json()
        assert pong["type"] == "pong"
        assert pong["timestamp"].endswith("Z")

        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid JSON"}

        ws.send_json({"type": "subscribe", "channel": "users.created"})
        assert ws.receive_json()["type"] == "error"


def test_bearer_header_is_accepted(client, users):
    dana = users["dana"]
    headers = {"Authorization": f"Bearer {token_for(dana)}"}

    with client.websocket_connect("/ws", headers=headers) as ws:
        assert ws.receive_json()["type"] == "connected"
        assert client.get("/health").json()["connections"] == 1

    assert client.get("/health").json()["connections"] == 0


def test_incident_updates_are_pushed(client, users):
    """An admin's socket sees the bus message and its own notification"""
    dana, root = users["dana"], users["root"]

    with client.websocket_connect(f"/ws?token={token_for(root)}") as ws:
        ws.receive_json()
        ws.send_json({"type": "subscribe", "channel": "incidents.created"})
        assert ws.receive_json() == {"type": "subscribed", "channel": "incidents.created"}

        response = client.post(
            "/incidents",
            json={"title": "Broken barrier", "priority": "HIGH"},
            headers={"Authorization": f"Bearer {token_for(dana)}"},
        )
        assert response.status_code == 201

        messages = [ws.receive_json() for _ in range(3)]
        by_type = {m["type"]: m for m in messages}
        assert set(by_type) == {"created", "channel", "notification"}
        assert by_type["created"]["data"]["title"] == "Broken barrier"
        assert by_type["channel"]["channel"] == "incidents.created"
        assert by_type["notification"]["data"]["title"] == "New Incident Reported"
        assert by_type["notification"]["data"]["priority"] == "high"


def test_escalation_is_pushed_once_and_stops_after_close(client, users, monkeypatch):
    dana, root = users["dana"], users["root"]
    headers = {"Authorization": f"Bearer {token_for(dana)}"}
    gateway = client.app.state.gateway
    bus = client.app.state.event_bus
    baseline = bus.subscriber_count()

    sent = []
    original_send = gateway._send

    async def recording_send(conn, message):
        sent.append((conn.user_id, message["type"]))
        return await original_send(conn, message)

    monkeypatch.setattr(gateway, "_send", recording_send)

    incident = client.post(
        "/incidents", json={"title": "Lost child at gate C", "priority": "HIGH"}, headers=headers
    ).json()
    escalation = {"userId": str(root.id), "reason": "Needs a supervisor"}

    with client.websocket_connect(f"/ws?token={token_for(dana)}") as ws:
        ws.receive_json()

        response = client.post(
            f"/incidents/{incident['id']}/escalate", json=escalation, headers=headers
        )
        assert response.status_code == 200
        escalated = ws.receive_json()
        assert escalated["type"] == "escalated"
        assert escalated["data"]["escalatedTo"] == str(root.id)

        # per-connection delivery is FIFO, so a duplicate would arrive first
        client.put(
            f"/incidents/{incident['id']}", json={"status": "IN_PROGRESS"}, headers=headers
        )
        assert ws.receive_json()["type"] == "status_changed"

    assert bus.subscriber_count() == baseline
    assert client.get("/health").json()["connections"] == 0

    sent.clear()
    again = client.post(
        f"/incidents/{incident['id']}/escalate", json=escalation, headers=headers
    )
    client.portal.call(bus.wait_idle)

    assert again.status_code == 200
    assert [s for s in sent if s[0] == dana.id] == []


def test_oversized_frame_closes_connection(client, users):
    with client.websocket_connect(f"/ws?token={token_for(users['dana'])}") as ws:
        ws.receive_json()
        ws.send_text("x" * 2048)

        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()

    assert exc_info.value.code == 1009
