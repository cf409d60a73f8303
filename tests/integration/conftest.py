from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Dict

import bcrypt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.app import create_app
from src.api.utils.jwt import generate_jwt
from src.depends import get_unit_of_work
from src.domain.entities import User, UserRole

PASSWORD = "SecurePass123!"
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(4)).decode()


class IntegrationConfig(ApplicationConfig):
    DB_CREATE_TABLES = False
    ENVIRONMENT = "test"
    ENABLE_LOGGING_MIDDLEWARE = False
    JWT_SECRET = "integration-secret"
    ADMIN_API_KEY = "test-admin-key-12345"
    AUTH_RATE_LIMIT_MAX_ATTEMPTS = 3
    EVENT_BUS_HANDLER_TIMEOUT_SECONDS = 5
    SMTP_HOST = ""


@dataclass
class SeededUser:
    user: User
    headers: Dict[str, str]

    @property
    def id(self) -> str:
        return str(self.user.id)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(session_factory):
    @asynccontextmanager
    async def uow_scope():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app = create_app(IntegrationConfig, uow_scope=uow_scope)

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    # ASGITransport does not send lifespan events; the fan-out subscribes there
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    async def drain_bus(response):
        await app.state.event_bus.wait_idle()

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        event_hooks={"response": [drain_bus]},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def seed_user(session_factory):
    """Factory storing a user directly and minting a bearer token for it"""

    async def _seed(
        username: str,
        role: UserRole = UserRole.user,
        email_notifications: bool = False,
        active: bool = True,
    ) -> SeededUser:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=PASSWORD_HASH,
            role=role,
            active=active,
            notification_preferences={"email": email_notifications},
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)

        token = generate_jwt(
            user.id, role.value, IntegrationConfig.JWT_SECRET, IntegrationConfig.JWT_EXPIRE_MINUTES
        )
        return SeededUser(user=user, headers={"Authorization": f"Bearer {token}"})

    return _seed


@pytest.fixture
def admin_headers():
    return {"X-Admin-API-Key": IntegrationConfig.ADMIN_API_KEY}
