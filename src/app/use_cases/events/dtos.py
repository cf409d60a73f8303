"""
Event Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the event domain.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import field_validator

from src.app.use_cases.shared import CamelModel, unique
from src.domain.base import naive_utc
from src.domain.entities import Event, EventStatus, EventType, Priority


# ============================================================================
# Command DTOs
# ============================================================================


class CreateEventCommand(CamelModel):
    """Fields for a new event; business rules are checked by validate_event"""

    name: str
    description: Optional[str] = None
    type: EventType = EventType.OTHER
    priority: Priority = Priority.MEDIUM
    location: Optional[Dict[str, Any]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    venue: Optional[str] = None
    participants: List[UUID] = []
    tags: List[str] = []
    metadata: Dict[str, Any] = {}

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)

    def to_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "priority": self.priority,
            "location": self.location or {},
            "start_date": self.start_date,
            "end_date": self.end_date,
            "venue": self.venue,
            "participants": [str(p) for p in unique(self.participants)],
            "tags": unique(self.tags),
            "event_metadata": self.metadata,
        }


class UpdateEventCommand(CamelModel):
    """Partial update; only fields present in the request are applied"""

    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[EventType] = None
    priority: Optional[Priority] = None
    location: Optional[Dict[str, Any]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    venue: Optional[str] = None
    participants: Optional[List[UUID]] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)

    def to_patch(self) -> Dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        if "participants" in patch:
            patch["participants"] = [str(p) for p in unique(patch["participants"] or [])]
        if "tags" in patch:
            patch["tags"] = unique(patch["tags"] or [])
        if "location" in patch:
            patch["location"] = patch["location"] or {}
        if "metadata" in patch:
            patch["event_metadata"] = patch.pop("metadata") or {}
        return patch


class ChangeEventStatusCommand(CamelModel):
    status: EventStatus


# ============================================================================
# Response DTOs
# ============================================================================


class EventResponse(CamelModel):
    """Event with its derived lifecycle flags"""

    id: UUID
    name: str
    description: Optional[str] = None
    type: EventType
    priority: Priority
    status: EventStatus
    location: Dict[str, Any]
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    venue: Optional[str] = None
    participants: List[str]
    tags: List[str]
    metadata: Dict[str, Any]
    created_by: UUID
    version: int
    created_at: datetime
    updated_at: datetime
    can_edit: bool
    is_active: bool
    can_cancel: bool
    can_complete: bool

    @classmethod
    def from_entity(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            name=event.name,
            description=event.description,
            type=event.type,
            priority=event.priority,
            status=event.status,
            location=event.location or {},
            start_date=event.start_date,
            end_date=event.end_date,
            venue=event.venue,
            participants=event.participants or [],
            tags=event.tags or [],
            metadata=event.event_metadata or {},
            created_by=event.created_by,
            version=event.version,
            created_at=event.created_at,
            updated_at=event.updated_at,
            can_edit=event.can_edit,
            is_active=event.is_active,
            can_cancel=event.can_cancel,
            can_complete=event.can_complete,
        )


class EventListResponse(CamelModel):
    items: List[EventResponse]
    total: int
    skip: int
    limit: int


class EventHistoryResponse(CamelModel):
    """History items are newest first"""

    items: List[Dict[str, Any]]
    total: int
    skip: int
    limit: int
