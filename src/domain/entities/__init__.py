"""
Event Control Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    EntityType,
    EventStatus,
    EventType,
    HistoryAction,
    IncidentStatus,
    IncidentType,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
    Priority,
    UserRole,
)

# Export all entities
from .user import User
from .event import Event
from .incident import Incident
from .notification import Notification
from .history_entry import HistoryEntry

__all__ = [
    # Enums
    "EntityType",
    "EventStatus",
    "EventType",
    "HistoryAction",
    "IncidentStatus",
    "IncidentType",
    "NotificationPriority",
    "NotificationStatus",
    "NotificationType",
    "Priority",
    "UserRole",
    # Entities
    "User",
    "Event",
    "Incident",
    "Notification",
    "HistoryEntry",
]
