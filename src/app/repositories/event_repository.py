from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import Event, EventStatus, EventType, Priority


class EventQuery(BaseModel):
    """Filter for listing events; list filters match with IN"""

    status: Optional[List[EventStatus]] = None
    type: Optional[List[EventType]] = None
    priority: Optional[List[Priority]] = None
    created_by: Optional[UUID] = None
    search: Optional[str] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    sort_by: Literal["created_at", "updated_at", "start_date", "name", "priority"] = (
        "created_at"
    )
    sort_order: Literal["asc", "desc"] = "desc"
    skip: int = 0
    limit: int = 20


class IEventRepository(ABC):
    """Event repository interface - application layer"""

    @abstractmethod
    async def create(self, event: Event) -> Event:
        pass

    @abstractmethod
    async def get_by_id(self, event_id: UUID) -> Optional[Event]:
        pass

    @abstractmethod
    async def find(self, query: EventQuery) -> Tuple[List[Event], int]:
        """Page of events matching query plus the total match count"""
        pass

    @abstractmethod
    async def apply_changes(
        self, event_id: UUID, expected_version: int, changes: Dict[str, Any]
    ) -> bool:
        """
        Compare-and-swap update.

        Applies changes and bumps version only if the stored version still
        equals expected_version. Returns False when the row moved on.
        """
        pass

    @abstractmethod
    async def delete(self, event: Event) -> None:
        pass
