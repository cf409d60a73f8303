"""
Incident Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the incident domain.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from src.app.use_cases.shared import CamelModel, unique
from src.domain.entities import Incident, IncidentStatus, IncidentType, Priority


# ============================================================================
# Command DTOs
# ============================================================================


class CreateIncidentCommand(CamelModel):
    """Fields for a new incident; business rules are checked by validate_incident"""

    title: str
    description: Optional[str] = None
    type: IncidentType = IncidentType.OTHER
    priority: Priority = Priority.MEDIUM
    event_id: Optional[UUID] = None
    assigned_to: Optional[UUID] = None
    location: Optional[str] = None
    tags: List[str] = []
    attachments: List[str] = []
    metadata: Dict[str, Any] = {}

    def to_fields(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "priority": self.priority,
            "event_id": self.event_id,
            "assigned_to": self.assigned_to,
            "location": self.location,
            "tags": unique(self.tags),
            "attachments": unique(self.attachments),
            "incident_metadata": self.metadata,
        }


class UpdateIncidentCommand(CamelModel):
    """
    Partial update. A status here is a transition request checked against
    the incident transition table.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[IncidentType] = None
    priority: Optional[Priority] = None
    status: Optional[IncidentStatus] = None
    event_id: Optional[UUID] = None
    location: Optional[str] = None
    tags: Optional[List[str]] = None
    attachments: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_patch(self) -> Dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        if patch.get("status") is None:
            patch.pop("status", None)
        for key in ("tags", "attachments"):
            if key in patch:
                patch[key] = unique(patch[key] or [])
        if "metadata" in patch:
            patch["incident_metadata"] = patch.pop("metadata") or {}
        return patch


class AssignIncidentCommand(CamelModel):
    user_id: Optional[UUID] = None


class EscalateIncidentCommand(CamelModel):
    user_id: Optional[UUID] = None
    reason: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class IncidentResponse(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    type: IncidentType
    priority: Priority
    status: IncidentStatus
    event_id: Optional[UUID] = None
    created_by: UUID
    assigned_to: Optional[UUID] = None
    escalated_to: Optional[UUID] = None
    location: Optional[str] = None
    tags: List[str]
    attachments: List[str]
    timeline: List[Dict[str, Any]]
    metadata: Dict[str, Any]
    version: int
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, incident: Incident) -> "IncidentResponse":
        return cls(
            id=incident.id,
            title=incident.title,
            description=incident.description,
            type=incident.type,
            priority=incident.priority,
            status=incident.status,
            event_id=incident.event_id,
            created_by=incident.created_by,
            assigned_to=incident.assigned_to,
            escalated_to=incident.escalated_to,
            location=incident.location,
            tags=incident.tags or [],
            attachments=incident.attachments or [],
            timeline=incident.timeline or [],
            metadata=incident.incident_metadata or {},
            version=incident.version,
            created_at=incident.created_at,
            updated_at=incident.updated_at,
            resolved_at=incident.resolved_at,
            closed_at=incident.closed_at,
        )


class IncidentListResponse(CamelModel):
    items: List[IncidentResponse]
    total: int
    skip: int
    limit: int


class TimelineResponse(CamelModel):
    """Entries oldest first, read from the history log"""

    incident_id: UUID
    items: List[Dict[str, Any]]
