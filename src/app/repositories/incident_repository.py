from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import Incident, IncidentStatus, IncidentType, Priority


class IncidentQuery(BaseModel):
    """Filter for listing incidents; list filters match with IN"""

    status: Optional[List[IncidentStatus]] = None
    type: Optional[List[IncidentType]] = None
    priority: Optional[List[Priority]] = None
    event_id: Optional[UUID] = None
    created_by: Optional[UUID] = None
    assigned_to: Optional[UUID] = None
    search: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    sort_by: Literal["created_at", "updated_at", "priority", "status", "title"] = (
        "created_at"
    )
    sort_order: Literal["asc", "desc"] = "desc"
    skip: int = 0
    limit: int = 20


class IIncidentRepository(ABC):
    """Incident repository interface - application layer"""

    @abstractmethod
    async def create(self, incident: Incident) -> Incident:
        pass

    @abstractmethod
    async def get_by_id(self, incident_id: UUID) -> Optional[Incident]:
        pass

    @abstractmethod
    async def find(self, query: IncidentQuery) -> Tuple[List[Incident], int]:
        """Page of incidents matching query plus the total match count"""
        pass

    @abstractmethod
    async def apply_changes(
        self, incident_id: UUID, expected_version: int, changes: Dict[str, Any]
    ) -> bool:
        """Compare-and-swap update, see IEventRepository.apply_changes"""
        pass

    @abstractmethod
    async def delete(self, incident: Incident) -> None:
        pass
