"""
Event Use Cases

Lifecycle and history of events.
"""

from .create_event_use_case import CreateEventUseCase
from .get_event_use_case import GetEventUseCase
from .list_events_use_case import ListEventsUseCase
from .update_event_use_case import UpdateEventUseCase
from .change_event_status_use_case import ChangeEventStatusUseCase
from .delete_event_use_case import DeleteEventUseCase
from .get_event_history_use_case import GetEventHistoryUseCase
from .dtos import (
    ChangeEventStatusCommand,
    CreateEventCommand,
    EventHistoryResponse,
    EventListResponse,
    EventResponse,
    UpdateEventCommand,
)

__all__ = [
    # Use Cases
    "CreateEventUseCase",
    "GetEventUseCase",
    "ListEventsUseCase",
    "UpdateEventUseCase",
    "ChangeEventStatusUseCase",
    "DeleteEventUseCase",
    "GetEventHistoryUseCase",
    # DTOs - Commands
    "CreateEventCommand",
    "UpdateEventCommand",
    "ChangeEventStatusCommand",
    # DTOs - Responses
    "EventResponse",
    "EventListResponse",
    "EventHistoryResponse",
]
