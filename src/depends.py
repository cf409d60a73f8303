from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.services.event_bus import IEventBus
from src.app.services.rate_limiter import AuthRateLimiter
from src.app.services.realtime_gateway import RealtimeGateway
from src.domain.authorization import Actor
from src.domain.entities import UserRole
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@asynccontextmanager
async def unit_of_work_scope():
    """Standalone unit of work for work running outside a request (bus consumers)"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_config(request: Request):
    return request.app.state.config


def get_event_bus(request: Request) -> IEventBus:
    return request.app.state.event_bus


def get_gateway(request: Request) -> RealtimeGateway:
    return request.app.state.gateway


def get_rate_limiter(request: Request) -> AuthRateLimiter:
    return request.app.state.rate_limiter


def actor_from_token(token: Optional[str], secret: str) -> Optional[Actor]:
    """Decode a bearer token into an Actor, None when it is missing or invalid"""
    if not token:
        return None
    payload = verify_jwt(token, secret)
    if payload is None:
        return None
    try:
        return Actor(id=UUID(payload["user_id"]), role=UserRole(payload["role"]))
    except (KeyError, TypeError, ValueError):
        return None


async def get_current_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Actor:
    """
    Dependency resolving the caller from the Authorization header.

    Raises:
        ClientError: 401 if the token is missing, invalid or expired
    """
    token = credentials.credentials if credentials else None
    actor = actor_from_token(token, request.app.state.config.JWT_SECRET)
    if actor is None:
        raise ClientError(
            Error("UNAUTHORIZED", "Invalid or expired token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return actor
