"""
Notification Entity

In-app message addressed to a single user.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow

from .enums import NotificationPriority, NotificationStatus, NotificationType

MAX_TITLE_LENGTH = 100
MAX_MESSAGE_LENGTH = 500


class Notification(SQLModel, table=True):
    """
    Notification entity.

    Business Rules:
    - Owned by user_id; only the recipient (or an admin) may read or change it
    - Status only moves forward: unread -> read -> archived, unread -> archived
    - Archived notifications older than the retention window are purged
    """

    __tablename__ = "notifications"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(nullable=False, index=True)

    type: NotificationType = Field(nullable=False)
    title: str = Field(max_length=MAX_TITLE_LENGTH)
    message: str = Field(max_length=MAX_MESSAGE_LENGTH)
    data: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    priority: NotificationPriority = Field(default=NotificationPriority.medium)
    status: NotificationStatus = Field(default=NotificationStatus.unread)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    read_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_notification_user_status", "user_id", "status"),
        Index("idx_notification_created_at", "created_at"),
    )
