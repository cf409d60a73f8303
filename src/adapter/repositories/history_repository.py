from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, or_
from sqlalchemy import select as sa_select
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories._query import count_rows, where_range
from src.app.repositories.history_repository import HistoryQuery, IHistoryRepository
from src.domain.entities import EntityType, HistoryEntry, Incident


class HistoryRepository(IHistoryRepository):
    """History repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: HistoryEntry) -> HistoryEntry:
        """Append an entry (immutable)"""
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def find(self, query: HistoryQuery) -> Tuple[List[HistoryEntry], int]:
        stmt = select(HistoryEntry)
        if query.entity_type is not None:
            stmt = stmt.where(HistoryEntry.entity_type == query.entity_type)
        if query.entity_id is not None:
            stmt = stmt.where(HistoryEntry.entity_id == query.entity_id)
        if query.user_id is not None:
            stmt = stmt.where(HistoryEntry.user_id == query.user_id)
        if query.action is not None:
            stmt = stmt.where(HistoryEntry.action == query.action)
        stmt = where_range(
            stmt, HistoryEntry.created_at, query.created_from, query.created_to
        )

        total = await count_rows(self.session, stmt)

        stmt = (
            stmt.order_by(col(HistoryEntry.created_at).desc())
            .offset(query.skip)
            .limit(query.limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def list_for_entity(
        self, entity_type: EntityType, entity_id: UUID
    ) -> List[HistoryEntry]:
        stmt = (
            select(HistoryEntry)
            .where(HistoryEntry.entity_type == entity_type)
            .where(HistoryEntry.entity_id == entity_id)
            .order_by(col(HistoryEntry.created_at).asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def delete_for_entity(self, entity_type: EntityType, entity_id: UUID) -> int:
        stmt = delete(HistoryEntry).where(
            col(HistoryEntry.entity_type) == entity_type,
            col(HistoryEntry.entity_id) == entity_id,
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete_older_than(
        self, cutoff: datetime, entity_type: Optional[EntityType] = None
    ) -> int:
        stmt = delete(HistoryEntry).where(col(HistoryEntry.created_at) < cutoff)
        if entity_type is not None:
            stmt = stmt.where(col(HistoryEntry.entity_type) == entity_type)
        # live incidents keep the rows their timeline is read from
        stmt = stmt.where(
            or_(
                col(HistoryEntry.entity_type) != EntityType.incident,
                col(HistoryEntry.entity_id).not_in(sa_select(Incident.id)),
            )
        ).execution_options(synchronize_session=False)
        result = await self.session.execute(stmt)
        return result.rowcount
