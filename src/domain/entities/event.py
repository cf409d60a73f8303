"""
Event Entity

A planned or emergency operation tracked through a lifecycle.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow

from .enums import EventStatus, EventType, Priority

EDITABLE_EVENT_STATUSES = frozenset(
    {EventStatus.DRAFT, EventStatus.PLANNED, EventStatus.PAUSED}
)
TERMINAL_EVENT_STATUSES = frozenset({EventStatus.COMPLETED, EventStatus.CANCELLED})


class Event(SQLModel, table=True):
    """
    Event entity.

    Business Rules:
    - Created DRAFT by its creator
    - end_date >= start_date when both are present
    - Field edits only while DRAFT, PLANNED or PAUSED (can_edit)
    - Never deleted while ACTIVE
    - version is bumped on every write (compare-and-swap)
    """

    __tablename__ = "events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)

    type: EventType = Field(default=EventType.OTHER)
    priority: Priority = Field(default=Priority.MEDIUM)
    status: EventStatus = Field(default=EventStatus.DRAFT, index=True)

    # {"coordinates": [lon, lat], "what3words": "..."}
    location: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    start_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    end_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    venue: Optional[str] = Field(default=None, max_length=200)

    participants: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    tags: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    event_metadata: dict = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )

    created_by: UUID = Field(index=True)
    version: int = Field(default=1)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_event_created_at", "created_at"),
        Index("idx_event_type_priority", "type", "priority"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == EventStatus.ACTIVE

    @property
    def can_edit(self) -> bool:
        return self.status in EDITABLE_EVENT_STATUSES

    @property
    def can_cancel(self) -> bool:
        return self.status not in TERMINAL_EVENT_STATUSES

    @property
    def can_complete(self) -> bool:
        return self.status in (EventStatus.ACTIVE, EventStatus.PAUSED)
