"""
Maintenance Use Cases

Retention jobs triggered through the admin API.
"""

from .purge_history_use_case import PurgeHistoryUseCase
from .purge_notifications_use_case import PurgeNotificationsUseCase
from .dtos import PurgeResponse

__all__ = [
    "PurgeHistoryUseCase",
    "PurgeNotificationsUseCase",
    "PurgeResponse",
]
