"""
Notification Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from src.app.use_cases.shared import CamelModel
from src.domain.entities import (
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)


class NotificationResponse(CamelModel):
    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any]
    priority: NotificationPriority
    status: NotificationStatus
    created_at: datetime
    read_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            data=notification.data or {},
            priority=notification.priority,
            status=notification.status,
            created_at=notification.created_at,
            read_at=notification.read_at,
        )


class NotificationListResponse(CamelModel):
    items: List[NotificationResponse]
    total: int
    skip: int
    limit: int


class UnreadCountResponse(CamelModel):
    count: int


class UpdatePreferencesCommand(CamelModel):
    """
    email is either one switch for every notification class or a
    per-class map, e.g. {"incident": true, "event": false}
    """

    email: Union[bool, Dict[NotificationType, bool]] = False


class PreferencesResponse(CamelModel):
    email: Union[bool, Dict[str, bool]]


class StatusResponse(CamelModel):
    status: str
