"""
Incident Use Cases

Reporting, working and closing incidents.
"""

from .create_incident_use_case import CreateIncidentUseCase
from .get_incident_use_case import GetIncidentUseCase
from .list_incidents_use_case import ListIncidentsUseCase
from .update_incident_use_case import UpdateIncidentUseCase
from .assign_incident_use_case import AssignIncidentUseCase
from .escalate_incident_use_case import EscalateIncidentUseCase
from .delete_incident_use_case import DeleteIncidentUseCase
from .get_incident_timeline_use_case import GetIncidentTimelineUseCase
from .dtos import (
    AssignIncidentCommand,
    CreateIncidentCommand,
    EscalateIncidentCommand,
    IncidentListResponse,
    IncidentResponse,
    TimelineResponse,
    UpdateIncidentCommand,
)

__all__ = [
    # Use Cases
    "CreateIncidentUseCase",
    "GetIncidentUseCase",
    "ListIncidentsUseCase",
    "UpdateIncidentUseCase",
    "AssignIncidentUseCase",
    "EscalateIncidentUseCase",
    "DeleteIncidentUseCase",
    "GetIncidentTimelineUseCase",
    # DTOs - Commands
    "CreateIncidentCommand",
    "UpdateIncidentCommand",
    "AssignIncidentCommand",
    "EscalateIncidentCommand",
    # DTOs - Responses
    "IncidentResponse",
    "IncidentListResponse",
    "TimelineResponse",
]
