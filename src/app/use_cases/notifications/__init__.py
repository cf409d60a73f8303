"""
Notification Use Cases

Recipient-side operations on stored notifications.
"""

from .list_notifications_use_case import ListNotificationsUseCase
from .count_unread_use_case import CountUnreadNotificationsUseCase
from .get_notification_use_case import GetNotificationUseCase
from .change_notification_status_use_case import (
    ArchiveNotificationUseCase,
    MarkNotificationReadUseCase,
)
from .delete_notification_use_case import DeleteNotificationUseCase
from .update_preferences_use_case import UpdateNotificationPreferencesUseCase
from .dtos import (
    NotificationListResponse,
    NotificationResponse,
    PreferencesResponse,
    StatusResponse,
    UnreadCountResponse,
    UpdatePreferencesCommand,
)

__all__ = [
    # Use Cases
    "ListNotificationsUseCase",
    "CountUnreadNotificationsUseCase",
    "GetNotificationUseCase",
    "MarkNotificationReadUseCase",
    "ArchiveNotificationUseCase",
    "DeleteNotificationUseCase",
    "UpdateNotificationPreferencesUseCase",
    # DTOs
    "UpdatePreferencesCommand",
    "NotificationResponse",
    "NotificationListResponse",
    "UnreadCountResponse",
    "PreferencesResponse",
    "StatusResponse",
]
