"""
Event Control Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """User role, ordered by ROLE_HIERARCHY in src.domain.authorization"""

    user = "user"
    supervisor = "supervisor"
    admin = "admin"
    system = "system"


class EventStatus(str, Enum):
    """Event lifecycle status"""

    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class EventType(str, Enum):
    """Event type"""

    EMERGENCY = "EMERGENCY"
    PLANNED = "PLANNED"
    MAINTENANCE = "MAINTENANCE"
    TRAINING = "TRAINING"
    OTHER = "OTHER"


class Priority(str, Enum):
    """Priority shared by events and incidents"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IncidentStatus(str, Enum):
    """Incident lifecycle status"""

    NEW = "NEW"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    ESCALATED = "ESCALATED"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class IncidentType(str, Enum):
    """Incident type"""

    SECURITY = "SECURITY"
    SAFETY = "SAFETY"
    MAINTENANCE = "MAINTENANCE"
    EMERGENCY = "EMERGENCY"
    OTHER = "OTHER"


class NotificationType(str, Enum):
    """Notification class, also the unit of email preferences"""

    event = "event"
    incident = "incident"
    system = "system"


class NotificationPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class NotificationStatus(str, Enum):
    """Notification status (unread -> read -> archived, never backwards)"""

    unread = "unread"
    read = "read"
    archived = "archived"


class HistoryAction(str, Enum):
    """Kind of change recorded in the history log"""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    STATUS_CHANGE = "STATUS_CHANGE"
    ASSIGNMENT = "ASSIGNMENT"
    ESCALATION = "ESCALATION"


class EntityType(str, Enum):
    """Parent entity kind of a history entry"""

    event = "event"
    incident = "incident"
