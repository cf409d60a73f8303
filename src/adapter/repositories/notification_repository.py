from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories._query import count_rows, where_in
from src.app.repositories.notification_repository import (
    INotificationRepository,
    NotificationQuery,
)
from src.domain.entities import Notification, NotificationStatus


class NotificationRepository(INotificationRepository):
    """Notification repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, notification: Notification) -> Notification:
        self.session.add(notification)
        await self.session.flush()
        await self.session.refresh(notification)
        return notification

    async def get_by_id(self, notification_id: UUID) -> Optional[Notification]:
        stmt = select(Notification).where(Notification.id == notification_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find(self, query: NotificationQuery) -> Tuple[List[Notification], int]:
        stmt = select(Notification)
        if query.user_id is not None:
            stmt = stmt.where(Notification.user_id == query.user_id)
        stmt = where_in(stmt, Notification.status, query.status)
        stmt = where_in(stmt, Notification.type, query.type)
        stmt = where_in(stmt, Notification.priority, query.priority)

        total = await count_rows(self.session, stmt)

        stmt = (
            stmt.order_by(col(Notification.created_at).desc())
            .offset(query.skip)
            .limit(query.limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def count(
        self, user_id: UUID, status: Optional[NotificationStatus] = None
    ) -> int:
        stmt = select(func.count()).where(Notification.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Notification.status == status)
        result = await self.session.exec(stmt)
        return result.one()

    async def update(self, notification: Notification) -> Notification:
        self.session.add(notification)
        await self.session.flush()
        await self.session.refresh(notification)
        return notification

    async def delete(self, notification: Notification) -> None:
        await self.session.delete(notification)
        await self.session.flush()

    async def delete_archived_older_than(self, cutoff: datetime) -> int:
        stmt = delete(Notification).where(
            col(Notification.status) == NotificationStatus.archived,
            col(Notification.created_at) < cutoff,
        )
        result = await self.session.execute(stmt)
        return result.rowcount
