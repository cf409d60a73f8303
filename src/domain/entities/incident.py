"""
Incident Entity

A reported problem worked through assignment, escalation and resolution.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow

from .enums import IncidentStatus, IncidentType, Priority


class Incident(SQLModel, table=True):
    """
    Incident entity.

    Business Rules:
    - Created NEW by its reporter with a single CREATED timeline entry
    - EMERGENCY incidents must carry CRITICAL priority
    - Deletable only when RESOLVED or CLOSED
    - Never mutated once CLOSED
    - timeline is a materialized view of the history rows for this incident,
      written in the same transaction as the field change it records
    - version is bumped on every write (compare-and-swap)
    """

    __tablename__ = "incidents"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)

    type: IncidentType = Field(default=IncidentType.OTHER)
    priority: Priority = Field(default=Priority.MEDIUM)
    status: IncidentStatus = Field(default=IncidentStatus.NEW, index=True)

    # Relations (event_id is a reference only, the event does not own the incident)
    event_id: Optional[UUID] = Field(default=None, index=True)
    created_by: UUID = Field(index=True)
    assigned_to: Optional[UUID] = Field(default=None, index=True)
    escalated_to: Optional[UUID] = Field(default=None)

    location: Optional[str] = Field(default=None, max_length=200)
    tags: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    attachments: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    timeline: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    incident_metadata: dict = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )

    version: int = Field(default=1)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    resolved_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    closed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_incident_created_at", "created_at"),
        Index("idx_incident_type_priority", "type", "priority"),
    )
