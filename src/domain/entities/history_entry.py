"""
HistoryEntry Entity

Append-only audit log of every event/incident mutation.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow

from .enums import EntityType, HistoryAction


class HistoryEntry(SQLModel, table=True):
    """
    HistoryEntry entity - one recorded change of an event or incident.

    Business Rules:
    - Immutable (never updated)
    - Cannot outlive its parent: deleted together with the event/incident
    - Pruned by retention policy (365 days event history, 90 days default)
    - changes stores {"field": {"from": old, "to": new}} for field edits
    """

    __tablename__ = "history"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    entity_type: EntityType = Field(nullable=False)
    entity_id: UUID = Field(nullable=False)
    action: HistoryAction = Field(nullable=False)
    user_id: Optional[UUID] = Field(default=None, index=True)

    from_status: Optional[str] = Field(default=None, max_length=32)
    to_status: Optional[str] = Field(default=None, max_length=32)
    target_user_id: Optional[UUID] = Field(default=None)
    reason: Optional[str] = Field(default=None, max_length=1000)
    changes: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_history_entity", "entity_type", "entity_id"),
        Index("idx_history_created_at", "created_at"),
        Index("idx_history_action", "action"),
    )
