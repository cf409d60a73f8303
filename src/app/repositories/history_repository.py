from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import EntityType, HistoryAction, HistoryEntry


class HistoryQuery(BaseModel):
    """Filter for the history log; results are newest first"""

    entity_type: Optional[EntityType] = None
    entity_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    action: Optional[HistoryAction] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    skip: int = 0
    limit: int = 20


class IHistoryRepository(ABC):
    """History (audit log) repository interface - application layer"""

    @abstractmethod
    async def create(self, entry: HistoryEntry) -> HistoryEntry:
        """Append an entry (immutable)"""
        pass

    @abstractmethod
    async def find(self, query: HistoryQuery) -> Tuple[List[HistoryEntry], int]:
        pass

    @abstractmethod
    async def list_for_entity(
        self, entity_type: EntityType, entity_id: UUID
    ) -> List[HistoryEntry]:
        """Every entry of one entity, oldest first"""
        pass

    @abstractmethod
    async def delete_for_entity(self, entity_type: EntityType, entity_id: UUID) -> int:
        pass

    @abstractmethod
    async def delete_older_than(
        self, cutoff: datetime, entity_type: Optional[EntityType] = None
    ) -> int:
        """Range delete by timestamp, returns rows deleted; rows of live incidents are kept"""
        pass
