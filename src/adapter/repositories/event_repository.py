from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_, update
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories._query import (
    count_rows,
    ordered,
    priority_rank,
    where_in,
    where_range,
)
from src.app.repositories.event_repository import EventQuery, IEventRepository
from src.domain.entities import Event


class EventRepository(IEventRepository):
    """Event repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: Event) -> Event:
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def get_by_id(self, event_id: UUID) -> Optional[Event]:
        # populate_existing: reads after apply_changes must see the stored row
        stmt = (
            select(Event)
            .where(Event.id == event_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find(self, query: EventQuery) -> Tuple[List[Event], int]:
        stmt = select(Event)
        stmt = where_in(stmt, Event.status, query.status)
        stmt = where_in(stmt, Event.type, query.type)
        stmt = where_in(stmt, Event.priority, query.priority)
        if query.created_by is not None:
            stmt = stmt.where(Event.created_by == query.created_by)
        if query.search:
            pattern = f"%{query.search}%"
            stmt = stmt.where(
                or_(col(Event.name).ilike(pattern), col(Event.description).ilike(pattern))
            )
        stmt = where_range(stmt, Event.start_date, query.start_from, query.start_to)
        stmt = where_range(stmt, Event.created_at, query.created_from, query.created_to)

        total = await count_rows(self.session, stmt)

        sort_column = (
            priority_rank(Event.priority)
            if query.sort_by == "priority"
            else getattr(Event, query.sort_by)
        )
        stmt = ordered(stmt, sort_column, query.sort_order)
        stmt = stmt.offset(query.skip).limit(query.limit)
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def apply_changes(
        self, event_id: UUID, expected_version: int, changes: Dict[str, Any]
    ) -> bool:
        stmt = (
            update(Event)
            .where(col(Event.id) == event_id, col(Event.version) == expected_version)
            .values(**changes, version=expected_version + 1)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, event: Event) -> None:
        await self.session.delete(event)
        await self.session.flush()
