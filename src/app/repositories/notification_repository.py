from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import (
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)


class NotificationQuery(BaseModel):
    user_id: Optional[UUID] = None
    status: Optional[List[NotificationStatus]] = None
    type: Optional[List[NotificationType]] = None
    priority: Optional[List[NotificationPriority]] = None
    skip: int = 0
    limit: int = 20


class INotificationRepository(ABC):
    """Notification repository interface - application layer"""

    @abstractmethod
    async def create(self, notification: Notification) -> Notification:
        pass

    @abstractmethod
    async def get_by_id(self, notification_id: UUID) -> Optional[Notification]:
        pass

    @abstractmethod
    async def find(self, query: NotificationQuery) -> Tuple[List[Notification], int]:
        """Newest first, plus the total match count"""
        pass

    @abstractmethod
    async def count(
        self, user_id: UUID, status: Optional[NotificationStatus] = None
    ) -> int:
        pass

    @abstractmethod
    async def update(self, notification: Notification) -> Notification:
        pass

    @abstractmethod
    async def delete(self, notification: Notification) -> None:
        pass

    @abstractmethod
    async def delete_archived_older_than(self, cutoff: datetime) -> int:
        """Remove archived notifications created before cutoff, returns rows deleted"""
        pass
